"""Registry records: publishers, their websites, and the offerings they sell.

Instances are plain dataclasses mapped imperatively by the SQLAlchemy adapter.
List and dict attributes are stored as JSON, so mutators always assign a new
object instead of changing one in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pubrecon.domain.model.entity import TimestampedEntity, union_preserving_order
from pubrecon.domain.model.enums import (
    AccountStatus,
    Availability,
    RecordStatus,
    RelationshipType,
    VerificationStatus,
)

if TYPE_CHECKING:
    from uuid import UUID

CONTACT_FIELDS = ("contact_name", "company_name", "phone", "payment_email", "payment_method")


@dataclass(eq=False, kw_only=True)
class Publisher(TimestampedEntity):
    email: str
    contact_name: str | None = None
    company_name: str | None = None
    phone: str | None = None
    payment_email: str | None = None
    payment_method: str | None = None
    account_status: AccountStatus = AccountStatus.SHADOW
    status: RecordStatus = RecordStatus.PENDING
    source: str | None = None
    source_metadata: dict[str, Any] = field(default_factory=dict)
    confidence_score: float | None = None

    def missing_contact_fields(self, incoming: dict[str, str | None]) -> dict[str, str]:
        """Return the subset of ``incoming`` that would fill a currently empty field."""

        filled: dict[str, str] = {}
        for name in CONTACT_FIELDS:
            value = incoming.get(name)
            if not value:
                continue
            if getattr(self, name):
                continue
            filled[name] = value
        return filled

    def fill_contact_fields(self, incoming: dict[str, str | None]) -> dict[str, str]:
        """Fill empty contact fields from ``incoming``; existing values are never overwritten."""

        filled = self.missing_contact_fields(incoming)
        for name, value in filled.items():
            setattr(self, name, value)
        if filled:
            self.touch()
        return filled


@dataclass(frozen=True, slots=True)
class TagGrowth:
    """Tags that a merge adds on top of what a website already carries."""

    categories: tuple[str, ...] = ()
    niche: tuple[str, ...] = ()

    @property
    def grows(self) -> bool:
        return bool(self.categories or self.niche)


@dataclass(eq=False, kw_only=True)
class Website(TimestampedEntity):
    domain: str
    categories: list[str] = field(default_factory=list)
    niche: list[str] = field(default_factory=list)
    website_type: list[str] = field(default_factory=list)
    domain_rating: int | None = None
    internal_notes: str | None = None
    status: RecordStatus = RecordStatus.ACTIVE
    source: str | None = None

    def tag_growth(self, *, categories: list[str], niche: list[str]) -> TagGrowth:
        current_categories = set(self.categories)
        current_niche = set(self.niche)
        return TagGrowth(
            categories=tuple(
                item
                for item in union_preserving_order([], categories)
                if item not in current_categories
            ),
            niche=tuple(
                item for item in union_preserving_order([], niche) if item not in current_niche
            ),
        )

    def merge_tags(self, *, categories: list[str], niche: list[str]) -> TagGrowth:
        """Union incoming tags into the stored sets; touches the record only when they grow."""

        growth = self.tag_growth(categories=categories, niche=niche)
        if not growth.grows:
            return growth
        self.categories = union_preserving_order(self.categories, list(growth.categories))
        self.niche = union_preserving_order(self.niche, list(growth.niche))
        self.touch()
        return growth


def availability_for(base_price: int | None) -> Availability:
    return Availability.AVAILABLE if base_price is not None else Availability.NEEDS_INFO


@dataclass(eq=False, kw_only=True)
class Offering(TimestampedEntity):
    publisher_id: UUID
    offering_type: str
    base_price: int | None = None
    currency: str = "USD"
    current_availability: Availability = Availability.NEEDS_INFO
    turnaround_days: int | None = None
    min_word_count: int | None = None
    max_word_count: int | None = None
    languages: list[str] = field(default_factory=lambda: ["en"])
    attributes: dict[str, Any] = field(default_factory=dict)
    is_active: bool = True
    source_email_id: UUID | None = None
    source_email_content: str | None = None
    pricing_extracted_from: str | None = None

    def refresh_availability(self) -> None:
        self.current_availability = availability_for(self.base_price)

    def merge_attributes(self, values: dict[str, Any]) -> None:
        self.attributes = {**self.attributes, **values}


@dataclass(eq=False, kw_only=True)
class PublisherWebsite(TimestampedEntity):
    """Ownership link between a publisher and one of its websites."""

    publisher_id: UUID
    website_id: UUID
    status: RecordStatus = RecordStatus.ACTIVE


@dataclass(eq=False, kw_only=True)
class OfferingRelationship(TimestampedEntity):
    """Ties an offering to the website it is sold on, with the contact who offered it."""

    publisher_id: UUID
    website_id: UUID
    offering_id: UUID | None = None
    relationship_type: RelationshipType = RelationshipType.CONTACT
    verification_status: VerificationStatus = VerificationStatus.CLAIMED
    contact_email: str | None = None
    contact_name: str | None = None
    is_active: bool = True
