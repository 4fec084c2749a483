"""Result manifest of an approval run."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from uuid import UUID


class ConflictResolution(StrEnum):
    SKIPPED = "skipped"
    UPDATED = "updated"


@dataclass(frozen=True, slots=True, kw_only=True)
class PriceConflictRecord:
    offering_type: str
    domain: str
    existing_price: int
    new_price: int
    action: ConflictResolution

    def to_dict(self) -> dict[str, Any]:
        return {
            "offeringType": self.offering_type,
            "domain": self.domain,
            "existingPrice": self.existing_price,
            "newPrice": self.new_price,
            "action": str(self.action),
        }


@dataclass(slots=True)
class CreatedRecords:
    """Ids of inserted rows. ``relationship_ids`` holds offering relationships only."""

    publisher_id: UUID | None = None
    website_ids: list[UUID] = field(default_factory=list)
    offering_ids: list[UUID] = field(default_factory=list)
    relationship_ids: list[UUID] = field(default_factory=list)
    publisher_website_ids: list[UUID] = field(default_factory=list)


@dataclass(slots=True)
class UpdatedRecords:
    publisher_updated: bool = False
    websites_updated: list[UUID] = field(default_factory=list)
    offerings_updated: list[UUID] = field(default_factory=list)


@dataclass(slots=True)
class SkippedRecords:
    duplicate_offerings: int = 0
    price_conflicts: int = 0
    existing_relationships: int = 0


def _ids(values: list[UUID]) -> list[str]:
    return [str(value) for value in values]


@dataclass(slots=True, kw_only=True)
class ApprovalManifest:
    draft_id: UUID
    publisher_id: UUID | None = None
    created: CreatedRecords = field(default_factory=CreatedRecords)
    updated: UpdatedRecords = field(default_factory=UpdatedRecords)
    skipped: SkippedRecords = field(default_factory=SkippedRecords)
    price_conflicts: list[PriceConflictRecord] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        created_publisher = self.created.publisher_id
        return {
            "success": self.success,
            "draftId": str(self.draft_id),
            "publisherId": str(self.publisher_id) if self.publisher_id else None,
            "created": {
                "publisherId": str(created_publisher) if created_publisher else None,
                "websiteIds": _ids(self.created.website_ids),
                "offeringIds": _ids(self.created.offering_ids),
                "relationshipIds": _ids(self.created.relationship_ids),
                "publisherWebsiteIds": _ids(self.created.publisher_website_ids),
            },
            "updated": {
                "publisherUpdated": self.updated.publisher_updated,
                "websitesUpdated": _ids(self.updated.websites_updated),
                "offeringsUpdated": _ids(self.updated.offerings_updated),
            },
            "skipped": {
                "duplicateOfferings": self.skipped.duplicate_offerings,
                "priceConflicts": self.skipped.price_conflicts,
                "existingRelationships": self.skipped.existing_relationships,
            },
            "priceConflicts": [record.to_dict() for record in self.price_conflicts],
            "errors": list(self.errors),
        }
