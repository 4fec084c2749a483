"""Extraction agent payload adapter."""

from __future__ import annotations

from .schema import (
    ExtractedDraft,
    ExtractedMetadata,
    ExtractedOffering,
    ExtractedPublisher,
    ExtractedWebsite,
)
from .translator import effective_payload, translate_payload

__all__ = [
    "ExtractedDraft",
    "ExtractedMetadata",
    "ExtractedOffering",
    "ExtractedPublisher",
    "ExtractedWebsite",
    "effective_payload",
    "translate_payload",
]
