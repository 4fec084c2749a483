"""SQLAlchemy mapping metadata for the registry and draft model."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from enum import StrEnum
from functools import cache
from typing import Any, cast

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from pubrecon.domain.model import (
    AccountStatus,
    Availability,
    Draft,
    DraftStatus,
    EmailLog,
    Offering,
    OfferingRelationship,
    Publisher,
    PublisherWebsite,
    RecordStatus,
    RelationshipType,
    VerificationStatus,
    Website,
)

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class StringListType(TypeDecorator[list[str]]):
    """Ordered tag list stored as a JSON array in a text column."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: list[str] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(list(value))

    def process_result_value(self, value: str | None, dialect: Dialect) -> list[str]:
        _ = dialect
        if value is None:
            return []
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return []
        items = cast(list[Any], loaded)
        return [item for item in items if isinstance(item, str)]


class JSONDictType(TypeDecorator[dict[str, Any]]):
    """JSON object stored in a text column."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: dict[str, Any] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(value, default=str)

    def process_result_value(self, value: str | None, dialect: Dialect) -> dict[str, Any] | None:
        _ = dialect
        if value is None:
            return None
        loaded = json.loads(value)
        if not isinstance(loaded, dict):
            return {}
        return cast(dict[str, Any], loaded)


def _enum(enum_cls: type[StrEnum]) -> Enum:
    """Persist enum values (not member names) in a plain string column."""

    return Enum(
        enum_cls,
        native_enum=False,
        values_callable=lambda members: [member.value for member in members],
    )


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def _timestamps() -> tuple[Column[datetime], Column[datetime]]:
    return (
        Column("created_at", UTCDateTime(), nullable=False),
        Column("updated_at", UTCDateTime(), nullable=False),
    )


# Registry --------------------------------------------------------------------

publisher_table = Table(
    "publisher",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("email", String, nullable=False, unique=True),
    Column("contact_name", String, nullable=True),
    Column("company_name", String, nullable=True),
    Column("phone", String, nullable=True),
    Column("payment_email", String, nullable=True),
    Column("payment_method", String, nullable=True),
    Column("account_status", _enum(AccountStatus), nullable=False),
    Column("status", _enum(RecordStatus), nullable=False),
    Column("source", String, nullable=True),
    Column("source_metadata", JSONDictType(), nullable=True),
    Column("confidence_score", Float, nullable=True),
    *_timestamps(),
)

website_table = Table(
    "website",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("domain", String, nullable=False, unique=True),
    Column("categories", StringListType(), nullable=False),
    Column("niche", StringListType(), nullable=False),
    Column("website_type", StringListType(), nullable=False),
    Column("domain_rating", Integer, nullable=True),
    Column("internal_notes", Text, nullable=True),
    Column("status", _enum(RecordStatus), nullable=False),
    Column("source", String, nullable=True),
    *_timestamps(),
)

offering_table = Table(
    "offering",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "publisher_id",
        UUIDColumnType,
        ForeignKey("publisher.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("offering_type", String, nullable=False),
    Column("base_price", Integer, nullable=True),
    Column("currency", String(3), nullable=False),
    Column("current_availability", _enum(Availability), nullable=False),
    Column("turnaround_days", Integer, nullable=True),
    Column("min_word_count", Integer, nullable=True),
    Column("max_word_count", Integer, nullable=True),
    Column("languages", StringListType(), nullable=False),
    Column("attributes", JSONDictType(), nullable=True),
    Column("is_active", Boolean, nullable=False),
    Column("source_email_id", UUIDColumnType, nullable=True),
    Column("source_email_content", Text, nullable=True),
    Column("pricing_extracted_from", Text, nullable=True),
    *_timestamps(),
    CheckConstraint("base_price IS NULL OR base_price >= 0", name="base_price_non_negative"),
    Index("ix_offering_publisher_type", "publisher_id", "offering_type"),
)

publisher_website_table = Table(
    "publisher_website",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "publisher_id",
        UUIDColumnType,
        ForeignKey("publisher.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "website_id",
        UUIDColumnType,
        ForeignKey("website.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("status", _enum(RecordStatus), nullable=False),
    *_timestamps(),
    UniqueConstraint("publisher_id", "website_id"),
)

offering_relationship_table = Table(
    "offering_relationship",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "publisher_id",
        UUIDColumnType,
        ForeignKey("publisher.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "website_id",
        UUIDColumnType,
        ForeignKey("website.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "offering_id",
        UUIDColumnType,
        ForeignKey("offering.id", ondelete="SET NULL"),
        nullable=True,
    ),
    Column("relationship_type", _enum(RelationshipType), nullable=False),
    Column("verification_status", _enum(VerificationStatus), nullable=False),
    Column("contact_email", String, nullable=True),
    Column("contact_name", String, nullable=True),
    Column("is_active", Boolean, nullable=False),
    *_timestamps(),
    UniqueConstraint("publisher_id", "website_id", "offering_id"),
)

# Drafts ----------------------------------------------------------------------

email_log_table = Table(
    "email_log",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("email_from", String, nullable=True),
    Column("campaign_id", String, nullable=True),
    Column("raw_content", Text, nullable=True),
    Column("html_content", Text, nullable=True),
    Column("received_at", UTCDateTime(), nullable=False),
)

draft_table = Table(
    "draft",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("parsed_payload", JSONDictType(), nullable=False),
    Column("edited_payload", JSONDictType(), nullable=True),
    Column("status", _enum(DraftStatus), nullable=False),
    Column(
        "email_log_id",
        UUIDColumnType,
        ForeignKey("email_log.id", ondelete="SET NULL"),
        nullable=True,
    ),
    Column(
        "publisher_id",
        UUIDColumnType,
        ForeignKey("publisher.id", ondelete="SET NULL"),
        nullable=True,
    ),
    Column(
        "website_id",
        UUIDColumnType,
        ForeignKey("website.id", ondelete="SET NULL"),
        nullable=True,
    ),
    Column("reviewed_at", UTCDateTime(), nullable=True),
    Column("rejection_reason", Text, nullable=True),
    *_timestamps(),
    Index("ix_draft_status", "status"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Publisher, publisher_table)
    mapper_registry.map_imperatively(Website, website_table)
    mapper_registry.map_imperatively(Offering, offering_table)
    mapper_registry.map_imperatively(PublisherWebsite, publisher_website_table)
    mapper_registry.map_imperatively(OfferingRelationship, offering_relationship_table)
    mapper_registry.map_imperatively(EmailLog, email_log_table)
    mapper_registry.map_imperatively(Draft, draft_table)

    configure_mappers()
    return mapper_registry
