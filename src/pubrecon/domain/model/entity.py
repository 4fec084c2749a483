"""Base building blocks shared by every persisted record."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4


def new_id() -> UUID:
    return uuid4()


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(eq=False, kw_only=True)
class Entity:
    """Internal identity exists immediately in the domain."""

    id: UUID = field(default_factory=new_id)


@dataclass(eq=False, kw_only=True)
class TimestampedEntity(Entity):
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def touch(self) -> None:
        self.updated_at = utc_now()


def union_preserving_order(existing: list[str], incoming: list[str]) -> list[str]:
    """Return ``existing`` followed by unseen ``incoming`` items (first occurrence wins)."""

    merged: list[str] = []
    seen: set[str] = set()
    for item in (*existing, *incoming):
        if item in seen:
            continue
        seen.add(item)
        merged.append(item)
    return merged
