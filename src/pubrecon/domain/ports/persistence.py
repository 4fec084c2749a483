"""Ports for persisting registry records and drafts."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from pubrecon.domain.model import (
    Draft,
    EmailLog,
    Offering,
    OfferingRelationship,
    Publisher,
    PublisherWebsite,
    Website,
)

if TYPE_CHECKING:
    from uuid import UUID


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...

    def get(self, entity_id: UUID) -> TEntity | None: ...


@runtime_checkable
class PublisherRepository(Repository[Publisher], Protocol):
    """Publishers keyed by their normalized email."""

    def get_by_email(self, email: str) -> Publisher | None: ...


@runtime_checkable
class WebsiteRepository(Repository[Website], Protocol):
    """Websites keyed by their normalized domain."""

    def get_by_domain(self, domain: str) -> Website | None: ...


@runtime_checkable
class OfferingRepository(Repository[Offering], Protocol):
    def find_active(
        self, *, publisher_id: UUID, website_id: UUID, offering_type: str
    ) -> tuple[Offering, OfferingRelationship] | None: ...


@runtime_checkable
class PublisherWebsiteRepository(Repository[PublisherWebsite], Protocol):
    def find(self, *, publisher_id: UUID, website_id: UUID) -> PublisherWebsite | None: ...


@runtime_checkable
class OfferingRelationshipRepository(Repository[OfferingRelationship], Protocol):
    def find_unattached(
        self, *, publisher_id: UUID, website_id: UUID
    ) -> OfferingRelationship | None:
        """Return an active relationship for the pair that does not point to an offering yet."""
        ...


@runtime_checkable
class DraftRepository(Repository[Draft], Protocol):
    def claim_for_approval(self, draft_id: UUID) -> bool:
        """Atomically mark a non-terminal draft approved; ``False`` when another writer won."""
        ...


@runtime_checkable
class EmailLogRepository(Repository[EmailLog], Protocol):
    """Read access to originating messages."""
