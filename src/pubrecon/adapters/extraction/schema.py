"""Schemas for the extraction agent's draft JSON.

The agent is a language model, so the payload is only semi-trusted: unknown keys
are ignored, blank strings count as missing, and a lone string where a list is
expected is accepted as a one-item list.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

log = logging.getLogger(__name__)

# Display units. Keeps a price in cents inside a signed 64-bit column.
MAX_BASE_PRICE = 1_000_000_000
MAX_COUNT = 2**31 - 1


def _blank_to_none(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _string_list(value: object) -> object:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list):
        return [item.strip() for item in value if isinstance(item, str) and item.strip()]
    return value


def _whole_number(value: object) -> object:
    value = _blank_to_none(value)
    if isinstance(value, float):
        return round(value)
    if isinstance(value, str):
        try:
            return round(float(value.strip()))
        except (ValueError, OverflowError):
            log.debug("Dropping unparseable number %r", value)
            return None
    return value


def _price(value: object) -> object:
    value = _blank_to_none(value)
    if isinstance(value, str):
        return value.strip().lstrip("$").replace(",", "")
    return value


class ExtractionBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ExtractedPublisher(ExtractionBaseModel):
    email: str | None = None
    contact_name: str | None = Field(default=None, alias="contactName")
    company_name: str | None = Field(default=None, alias="companyName")
    phone: str | None = None
    payment_email: str | None = Field(default=None, alias="paymentEmail")
    payment_methods: list[str] = Field(default_factory=list, alias="paymentMethods")

    @field_validator(
        "email", "contact_name", "company_name", "phone", "payment_email", mode="before"
    )
    @classmethod
    def _blank_strings(cls, value: object) -> object:
        return _blank_to_none(value)

    @field_validator("payment_methods", mode="before")
    @classmethod
    def _methods(cls, value: object) -> object:
        return _string_list(value)


class ExtractedWebsite(ExtractionBaseModel):
    domain: str | None = None
    categories: list[str] = Field(default_factory=list)
    niche: list[str] = Field(default_factory=list)
    suggested_new_niches: list[str] = Field(default_factory=list, alias="suggestedNewNiches")
    website_type: list[str] = Field(default_factory=list, alias="websiteType")
    domain_rating: int | None = Field(default=None, alias="domainRating", ge=0, le=MAX_COUNT)
    internal_notes: str | None = Field(default=None, alias="internalNotes")

    @field_validator("domain", "internal_notes", mode="before")
    @classmethod
    def _blank_strings(cls, value: object) -> object:
        return _blank_to_none(value)

    @field_validator("domain_rating", mode="before")
    @classmethod
    def _rating(cls, value: object) -> object:
        return _whole_number(value)

    @field_validator(
        "categories", "niche", "suggested_new_niches", "website_type", mode="before"
    )
    @classmethod
    def _tags(cls, value: object) -> object:
        return _string_list(value)


class ExtractedOffering(ExtractionBaseModel):
    offering_type: str = Field(alias="offeringType")
    website_domain: str | None = Field(default=None, alias="websiteDomain")
    base_price: float | None = Field(
        default=None,
        alias="basePrice",
        allow_inf_nan=False,
        ge=-MAX_BASE_PRICE,
        le=MAX_BASE_PRICE,
    )
    currency: str | None = None
    turnaround_days: int | None = Field(default=None, alias="turnaroundDays", ge=0, le=MAX_COUNT)
    min_word_count: int | None = Field(default=None, alias="minWordCount", ge=0, le=MAX_COUNT)
    max_word_count: int | None = Field(default=None, alias="maxWordCount", ge=0, le=MAX_COUNT)
    requirements: Any = None

    @field_validator("website_domain", "currency", mode="before")
    @classmethod
    def _blank_strings(cls, value: object) -> object:
        return _blank_to_none(value)

    @field_validator("turnaround_days", "min_word_count", "max_word_count", mode="before")
    @classmethod
    def _counts(cls, value: object) -> object:
        return _whole_number(value)

    @field_validator("base_price", mode="before")
    @classmethod
    def _base_price(cls, value: object) -> object:
        return _price(value)

    @field_validator("currency")
    @classmethod
    def _currency_code(cls, value: str | None) -> str | None:
        return value.strip().upper() if value is not None else None


class ExtractedMetadata(ExtractionBaseModel):
    confidence: float | None = None
    pricing_source: str | None = Field(default=None, alias="pricingSource")

    @field_validator("pricing_source", mode="before")
    @classmethod
    def _blank_strings(cls, value: object) -> object:
        return _blank_to_none(value)


class ExtractedDraft(ExtractionBaseModel):
    """Effective draft payload (parsed extraction overlaid with operator edits)."""

    has_offer: bool = Field(default=False, alias="hasOffer")
    publisher: ExtractedPublisher | None = None
    websites: list[ExtractedWebsite] = Field(default_factory=list)
    offerings: list[ExtractedOffering] = Field(default_factory=list)
    extraction_metadata: ExtractedMetadata | None = Field(
        default=None, alias="extractionMetadata"
    )

    @field_validator("websites", "offerings", mode="before")
    @classmethod
    def _null_lists(cls, value: object) -> object:
        return [] if value is None else value
