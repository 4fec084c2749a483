"""Draft reconciliation: normalize, resolve, classify, preview, and apply.

Responsibilities by module:
- ``normalize``: identity keys for publishers and websites
- ``resolve``: read-only lookups shared by preview and apply
- ``conflicts``: offering classification and price drift thresholds
- ``evidence``: pricing excerpts kept as offering provenance
- ``preview``/``plan``: dry-run action plan
- ``execute``/``manifest``: transactional apply and its result
"""

from __future__ import annotations

from .conflicts import (
    PRICE_CONFLICT_ABSOLUTE_THRESHOLD,
    PRICE_CONFLICT_PERCENT_THRESHOLD,
    OfferingDecision,
    OfferingDecisionKind,
    PriceDelta,
    classify_offering,
    to_minor_units,
)
from .defaults import RegistryDefaults
from .evidence import extract_pricing_snippet
from .execute import execute_plan
from .manifest import ApprovalManifest, ConflictResolution, PriceConflictRecord
from .normalize import normalize_domain, normalize_email
from .plan import (
    ActionPlan,
    ImpactCounters,
    OfferingAction,
    PublisherAction,
    PublisherActionKind,
    RelationshipAction,
    RelationshipActionKind,
    WebsiteAction,
    WebsiteActionKind,
)
from .preview import plan_preview
from .resolve import EntityResolver

__all__ = [
    "PRICE_CONFLICT_ABSOLUTE_THRESHOLD",
    "PRICE_CONFLICT_PERCENT_THRESHOLD",
    "ActionPlan",
    "ApprovalManifest",
    "ConflictResolution",
    "EntityResolver",
    "ImpactCounters",
    "OfferingAction",
    "OfferingDecision",
    "OfferingDecisionKind",
    "PriceConflictRecord",
    "PriceDelta",
    "PublisherAction",
    "PublisherActionKind",
    "RegistryDefaults",
    "RelationshipAction",
    "RelationshipActionKind",
    "WebsiteAction",
    "WebsiteActionKind",
    "classify_offering",
    "execute_plan",
    "extract_pricing_snippet",
    "normalize_domain",
    "normalize_email",
    "plan_preview",
    "to_minor_units",
]
