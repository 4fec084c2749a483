"""Translate extraction JSON into the typed draft payload."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from pubrecon.domain.drafts import (
    DraftPayload,
    ExtractionMetadata,
    OfferingClaim,
    PublisherClaim,
    WebsiteClaim,
    merge_payloads,
)
from pubrecon.domain.errors import InvalidPayloadError

from .schema import ExtractedDraft, ExtractedOffering, ExtractedPublisher, ExtractedWebsite

if TYPE_CHECKING:
    from pubrecon.domain.model import Draft

log = logging.getLogger(__name__)


def _publisher(schema: ExtractedPublisher | None) -> PublisherClaim | None:
    if schema is None:
        return None
    return PublisherClaim(
        email=schema.email.strip() if schema.email else None,
        contact_name=schema.contact_name,
        company_name=schema.company_name,
        phone=schema.phone,
        payment_email=schema.payment_email,
        payment_methods=tuple(schema.payment_methods),
    )


def _website(schema: ExtractedWebsite) -> WebsiteClaim:
    return WebsiteClaim(
        domain=schema.domain,
        categories=tuple(schema.categories),
        niche=tuple(schema.niche),
        suggested_new_niches=tuple(schema.suggested_new_niches),
        website_type=tuple(schema.website_type),
        domain_rating=schema.domain_rating,
        internal_notes=schema.internal_notes,
    )


def _offering(schema: ExtractedOffering) -> OfferingClaim:
    return OfferingClaim(
        offering_type=schema.offering_type,
        website_domain=schema.website_domain,
        base_price=schema.base_price,
        currency=schema.currency,
        turnaround_days=schema.turnaround_days,
        min_word_count=schema.min_word_count,
        max_word_count=schema.max_word_count,
        requirements=schema.requirements,
        original=schema.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


def translate_payload(raw: dict[str, Any]) -> DraftPayload:
    """Validate an effective payload and convert it into domain claims."""

    try:
        schema = ExtractedDraft.model_validate(raw)
    except ValidationError as exc:
        log.warning("Rejected draft payload: %s", exc)
        raise InvalidPayloadError(f"Invalid draft payload: {exc}") from exc

    metadata = schema.extraction_metadata
    return DraftPayload(
        has_offer=schema.has_offer,
        publisher=_publisher(schema.publisher),
        websites=tuple(_website(website) for website in schema.websites),
        offerings=tuple(_offering(offering) for offering in schema.offerings),
        extraction_metadata=ExtractionMetadata(
            confidence=metadata.confidence if metadata else None,
            pricing_source=metadata.pricing_source if metadata else None,
        ),
        raw=raw,
    )


def effective_payload(draft: Draft) -> DraftPayload:
    """Merge a draft's edits over its extraction and translate the result."""

    return translate_payload(merge_payloads(draft.parsed_payload, draft.edited_payload))
