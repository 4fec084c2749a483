"""Typed view of a draft's effective payload.

The extraction collaborator hands over loosely structured JSON. Drafts keep that
JSON verbatim (``parsed_payload``) next to a sparse human override
(``edited_payload``); the effective payload is their shallow merge. The
dataclasses below are what reconciliation works with once the extraction
adapter has validated that merge.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def merge_payloads(
    parsed: dict[str, Any], edited: dict[str, Any] | None
) -> dict[str, Any]:
    """Overlay ``edited`` on ``parsed``; edited top-level keys replace parsed ones wholesale."""

    if not edited:
        return dict(parsed)
    return {**parsed, **edited}


@dataclass(frozen=True, slots=True, kw_only=True)
class PublisherClaim:
    email: str | None = None
    contact_name: str | None = None
    company_name: str | None = None
    phone: str | None = None
    payment_email: str | None = None
    payment_methods: tuple[str, ...] = ()

    @property
    def payment_method(self) -> str | None:
        return self.payment_methods[0] if self.payment_methods else None

    def contact_fields(self) -> dict[str, str | None]:
        return {
            "contact_name": self.contact_name,
            "company_name": self.company_name,
            "phone": self.phone,
            "payment_email": self.payment_email,
            "payment_method": self.payment_method,
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class WebsiteClaim:
    domain: str | None = None
    categories: tuple[str, ...] = ()
    niche: tuple[str, ...] = ()
    suggested_new_niches: tuple[str, ...] = ()
    website_type: tuple[str, ...] = ()
    domain_rating: int | None = None
    internal_notes: str | None = None

    @property
    def all_niches(self) -> list[str]:
        return [*self.niche, *self.suggested_new_niches]


@dataclass(frozen=True, slots=True, kw_only=True)
class OfferingClaim:
    offering_type: str
    website_domain: str | None = None
    base_price: float | None = None
    currency: str | None = None
    turnaround_days: int | None = None
    min_word_count: int | None = None
    max_word_count: int | None = None
    requirements: Any = None
    original: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True, kw_only=True)
class ExtractionMetadata:
    confidence: float | None = None
    pricing_source: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class DraftPayload:
    has_offer: bool
    publisher: PublisherClaim | None = None
    websites: tuple[WebsiteClaim, ...] = ()
    offerings: tuple[OfferingClaim, ...] = ()
    extraction_metadata: ExtractionMetadata = field(default_factory=ExtractionMetadata)
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def publisher_email(self) -> str | None:
        if self.publisher is None:
            return None
        return self.publisher.email or None
