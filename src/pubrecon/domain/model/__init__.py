"""Public domain model surface."""

from __future__ import annotations

from pubrecon.domain.model.drafts import Draft, EmailLog
from pubrecon.domain.model.entity import (
    Entity,
    TimestampedEntity,
    new_id,
    union_preserving_order,
    utc_now,
)
from pubrecon.domain.model.enums import (
    AccountStatus,
    Availability,
    DraftStatus,
    RecordStatus,
    RelationshipType,
    VerificationStatus,
)
from pubrecon.domain.model.registry import (
    Offering,
    OfferingRelationship,
    Publisher,
    PublisherWebsite,
    TagGrowth,
    Website,
    availability_for,
)

__all__ = [
    "AccountStatus",
    "Availability",
    "Draft",
    "DraftStatus",
    "EmailLog",
    "Entity",
    "Offering",
    "OfferingRelationship",
    "Publisher",
    "PublisherWebsite",
    "RecordStatus",
    "RelationshipType",
    "TagGrowth",
    "TimestampedEntity",
    "VerificationStatus",
    "Website",
    "availability_for",
    "new_id",
    "union_preserving_order",
    "utc_now",
]
