"""Draft payload types and the review lifecycle."""

from __future__ import annotations

from .lifecycle import (
    TERMINAL_STATES,
    TRANSITIONS,
    DraftEvent,
    apply_event,
    ensure_transition,
    next_status,
)
from .payload import (
    DraftPayload,
    ExtractionMetadata,
    OfferingClaim,
    PublisherClaim,
    WebsiteClaim,
    merge_payloads,
)

__all__ = [
    "TERMINAL_STATES",
    "TRANSITIONS",
    "DraftEvent",
    "DraftPayload",
    "ExtractionMetadata",
    "OfferingClaim",
    "PublisherClaim",
    "WebsiteClaim",
    "apply_event",
    "ensure_transition",
    "merge_payloads",
    "next_status",
]
