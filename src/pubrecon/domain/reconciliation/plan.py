"""Preview plan types shared by the planner and its callers.

An :class:`ActionPlan` is the dry-run answer to "what would approving this draft
do". Its ``to_dict`` output is the wire shape returned by the preview endpoint.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from .conflicts import OfferingDecisionKind

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from pubrecon.domain.model import (
        Offering,
        Publisher,
        PublisherWebsite,
        Website,
    )

    from .conflicts import PriceDelta


class PublisherActionKind(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    SKIP = "skip"


class WebsiteActionKind(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    EXISTS = "exists"


class RelationshipActionKind(StrEnum):
    CREATE = "create"
    EXISTS = "exists"


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _str_or_none(value: object) -> str | None:
    return str(value) if value is not None else None


def publisher_snapshot(publisher: Publisher) -> dict[str, Any]:
    return {
        "id": str(publisher.id),
        "email": publisher.email,
        "contactName": publisher.contact_name,
        "companyName": publisher.company_name,
        "phone": publisher.phone,
        "paymentEmail": publisher.payment_email,
        "paymentMethod": publisher.payment_method,
        "accountStatus": str(publisher.account_status),
        "status": str(publisher.status),
        "source": publisher.source,
        "confidenceScore": publisher.confidence_score,
        "createdAt": _iso(publisher.created_at),
        "updatedAt": _iso(publisher.updated_at),
    }


def website_snapshot(website: Website) -> dict[str, Any]:
    return {
        "id": str(website.id),
        "domain": website.domain,
        "categories": list(website.categories),
        "niche": list(website.niche),
        "websiteType": list(website.website_type),
        "domainRating": website.domain_rating,
        "status": str(website.status),
        "createdAt": _iso(website.created_at),
        "updatedAt": _iso(website.updated_at),
    }


def offering_snapshot(offering: Offering) -> dict[str, Any]:
    return {
        "id": str(offering.id),
        "publisherId": str(offering.publisher_id),
        "offeringType": offering.offering_type,
        "basePrice": offering.base_price,
        "currency": offering.currency,
        "currentAvailability": str(offering.current_availability),
        "turnaroundDays": offering.turnaround_days,
        "minWordCount": offering.min_word_count,
        "maxWordCount": offering.max_word_count,
        "isActive": offering.is_active,
    }


def publisher_website_snapshot(link: PublisherWebsite) -> dict[str, Any]:
    return {
        "id": str(link.id),
        "publisherId": str(link.publisher_id),
        "websiteId": str(link.website_id),
        "status": str(link.status),
    }


@dataclass(frozen=True, slots=True, kw_only=True)
class PublisherAction:
    kind: PublisherActionKind
    email: str | None = None
    publisher_id: UUID | None = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True, kw_only=True)
class WebsiteAction:
    """``website_id`` is a placeholder for websites that do not exist yet."""

    kind: WebsiteActionKind
    domain: str
    website_id: UUID
    added_categories: tuple[str, ...] = ()
    added_niche: tuple[str, ...] = ()
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"action": str(self.kind), "domain": self.domain}
        if self.kind is WebsiteActionKind.UPDATE:
            data["details"] = {
                "addCategories": list(self.added_categories),
                "addNiches": list(self.added_niche),
            }
        elif self.details:
            data["details"] = self.details
        if self.kind is not WebsiteActionKind.CREATE:
            data["websiteId"] = str(self.website_id)
        return data


@dataclass(frozen=True, slots=True, kw_only=True)
class OfferingAction:
    kind: OfferingDecisionKind
    offering_type: str
    domain: str
    existing_offering_id: UUID | None = None
    new_price: int | None = None
    existing_price: int | None = None
    price_conflict: PriceDelta | None = None
    reason: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "action": str(self.kind),
            "type": self.offering_type,
            "websiteDomain": self.domain,
            "newPrice": self.new_price,
            "existingPrice": self.existing_price,
        }
        if self.existing_offering_id is not None:
            data["existingOfferingId"] = str(self.existing_offering_id)
        if self.price_conflict is not None:
            data["priceConflict"] = self.price_conflict.to_dict()
        if self.reason is not None:
            data["reason"] = self.reason
        if self.details:
            data["details"] = self.details
        return data


@dataclass(frozen=True, slots=True, kw_only=True)
class RelationshipAction:
    kind: RelationshipActionKind
    publisher_email: str
    domain: str
    existing_link_id: UUID | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "action": str(self.kind),
            "publisherEmail": self.publisher_email,
            "websiteDomain": self.domain,
        }
        if self.existing_link_id is not None:
            data["existingRelationshipId"] = str(self.existing_link_id)
        return data


@dataclass(slots=True)
class ImpactCounters:
    new_publishers: int = 0
    new_websites: int = 0
    new_offerings: int = 0
    updated_records: int = 0
    price_conflicts: int = 0
    skipped_duplicates: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "newPublishers": self.new_publishers,
            "newWebsites": self.new_websites,
            "newOfferings": self.new_offerings,
            "updatedRecords": self.updated_records,
            "priceConflicts": self.price_conflicts,
            "skippedDuplicates": self.skipped_duplicates,
        }


@dataclass(slots=True)
class CurrentState:
    """Registry rows the plan was computed against."""

    publisher: dict[str, Any] | None = None
    websites: list[dict[str, Any]] = field(default_factory=list)
    offerings: list[dict[str, Any]] = field(default_factory=list)
    relationships: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "publisher": self.publisher,
            "websites": self.websites,
            "offerings": self.offerings,
            "relationships": self.relationships,
        }


@dataclass(slots=True, kw_only=True)
class ActionPlan:
    publisher: PublisherAction
    draft_id: UUID | None = None
    websites: list[WebsiteAction] = field(default_factory=list)
    offerings: list[OfferingAction] = field(default_factory=list)
    relationships: list[RelationshipAction] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    impact: ImpactCounters = field(default_factory=ImpactCounters)
    current_state: CurrentState = field(default_factory=CurrentState)

    def website_for(self, domain: str) -> WebsiteAction | None:
        for action in self.websites:
            if action.domain == domain:
                return action
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "draftId": _str_or_none(self.draft_id),
            "currentState": self.current_state.to_dict(),
            "proposedActions": {
                "publisherAction": str(self.publisher.kind),
                "publisherDetails": self.publisher.details or None,
                "websiteActions": [action.to_dict() for action in self.websites],
                "offeringActions": [action.to_dict() for action in self.offerings],
                "relationshipActions": [action.to_dict() for action in self.relationships],
            },
            "warnings": list(self.warnings),
            "estimatedImpact": self.impact.to_dict(),
        }
