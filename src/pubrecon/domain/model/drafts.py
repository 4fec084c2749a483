"""Inbound extraction drafts and the messages they came from."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pubrecon.domain.model.entity import Entity, TimestampedEntity, utc_now
from pubrecon.domain.model.enums import DraftStatus

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


@dataclass(eq=False, kw_only=True)
class EmailLog(Entity):
    """Originating message; owned by the mail ingestion side and only read here."""

    email_from: str | None = None
    campaign_id: str | None = None
    raw_content: str | None = None
    html_content: str | None = None
    received_at: datetime = field(default_factory=utc_now)

    @property
    def source_content(self) -> str | None:
        return self.html_content or self.raw_content


@dataclass(eq=False, kw_only=True)
class Draft(TimestampedEntity):
    parsed_payload: dict[str, Any]
    edited_payload: dict[str, Any] | None = None
    status: DraftStatus = DraftStatus.PENDING
    email_log_id: UUID | None = None
    publisher_id: UUID | None = None
    website_id: UUID | None = None
    reviewed_at: datetime | None = None
    rejection_reason: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in {DraftStatus.APPROVED, DraftStatus.REJECTED}
