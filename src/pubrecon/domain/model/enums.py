"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class DraftStatus(StrEnum):
    PENDING = "pending"
    REVIEWING = "reviewing"
    APPROVED = "approved"
    REJECTED = "rejected"


class AccountStatus(StrEnum):
    """Lifecycle of a publisher account, ``shadow`` for inferred publishers."""

    SHADOW = "shadow"
    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"


class RecordStatus(StrEnum):
    """Review status shared by registry records and ownership links."""

    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"


class Availability(StrEnum):
    AVAILABLE = "available"
    NEEDS_INFO = "needs_info"
    LIMITED = "limited"
    PAUSED = "paused"


class VerificationStatus(StrEnum):
    CLAIMED = "claimed"
    VERIFIED = "verified"
    CONTACT = "contact"


class RelationshipType(StrEnum):
    CONTACT = "contact"

