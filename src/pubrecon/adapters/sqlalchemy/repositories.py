"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import select, update

from pubrecon.adapters.sqlalchemy.mappings import (
    draft_table,
    offering_relationship_table,
    offering_table,
    publisher_table,
    publisher_website_table,
    website_table,
)
from pubrecon.domain.model import (
    Draft,
    DraftStatus,
    EmailLog,
    Offering,
    OfferingRelationship,
    Publisher,
    PublisherWebsite,
    Website,
    utc_now,
)

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.engine import CursorResult
    from sqlalchemy.orm import Session


class SqlAlchemyRepository[TEntity]:
    """Shared add/get for repositories over one mapped class."""

    def __init__(self, session: Session, entity_cls: type[TEntity]) -> None:
        self.session = session
        self._entity_cls = entity_cls

    def add(self, entity: TEntity) -> None:
        self.session.add(entity)
        # flushed here so constraint violations surface inside the caller's savepoint
        self.session.flush()

    def get(self, entity_id: uuid.UUID) -> TEntity | None:
        return self.session.get(self._entity_cls, entity_id)


class SqlAlchemyPublisherRepository(SqlAlchemyRepository[Publisher]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Publisher)

    def get_by_email(self, email: str) -> Publisher | None:
        stmt = select(Publisher).where(publisher_table.c.email == email).limit(1)
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyWebsiteRepository(SqlAlchemyRepository[Website]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Website)

    def get_by_domain(self, domain: str) -> Website | None:
        stmt = select(Website).where(website_table.c.domain == domain).limit(1)
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyOfferingRepository(SqlAlchemyRepository[Offering]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Offering)

    def find_active(
        self, *, publisher_id: uuid.UUID, website_id: uuid.UUID, offering_type: str
    ) -> tuple[Offering, OfferingRelationship] | None:
        stmt = (
            select(Offering, OfferingRelationship)
            .join(
                offering_relationship_table,
                offering_relationship_table.c.offering_id == offering_table.c.id,
            )
            .where(offering_table.c.publisher_id == publisher_id)
            .where(offering_relationship_table.c.website_id == website_id)
            .where(offering_table.c.offering_type == offering_type)
            .where(offering_table.c.is_active.is_(True))
            .order_by(offering_table.c.created_at)
            .limit(1)
        )
        row = self.session.execute(stmt).first()
        if row is None:
            return None
        offering, relationship = row
        return offering, relationship


class SqlAlchemyPublisherWebsiteRepository(SqlAlchemyRepository[PublisherWebsite]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, PublisherWebsite)

    def find(self, *, publisher_id: uuid.UUID, website_id: uuid.UUID) -> PublisherWebsite | None:
        stmt = (
            select(PublisherWebsite)
            .where(publisher_website_table.c.publisher_id == publisher_id)
            .where(publisher_website_table.c.website_id == website_id)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyOfferingRelationshipRepository(SqlAlchemyRepository[OfferingRelationship]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, OfferingRelationship)

    def find_unattached(
        self, *, publisher_id: uuid.UUID, website_id: uuid.UUID
    ) -> OfferingRelationship | None:
        stmt = (
            select(OfferingRelationship)
            .where(offering_relationship_table.c.publisher_id == publisher_id)
            .where(offering_relationship_table.c.website_id == website_id)
            .where(offering_relationship_table.c.offering_id.is_(None))
            .where(offering_relationship_table.c.is_active.is_(True))
            .order_by(offering_relationship_table.c.created_at)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyDraftRepository(SqlAlchemyRepository[Draft]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Draft)

    def claim_for_approval(self, draft_id: uuid.UUID) -> bool:
        stmt = (
            update(draft_table)
            .where(draft_table.c.id == draft_id)
            .where(draft_table.c.status.not_in([DraftStatus.APPROVED, DraftStatus.REJECTED]))
            .values(status=DraftStatus.APPROVED, updated_at=utc_now())
        )
        result = cast("CursorResult[tuple[()]]", self.session.execute(stmt))
        return result.rowcount == 1


class SqlAlchemyEmailLogRepository(SqlAlchemyRepository[EmailLog]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, EmailLog)
