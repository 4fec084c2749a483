"""Domain-specific exception classes for draft reconciliation."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID

    from pubrecon.domain.model import DraftStatus


class ReconciliationError(Exception):
    """Base class for precondition failures; raised before anything is written."""


class DraftNotFoundError(ReconciliationError):
    def __init__(self, draft_id: UUID) -> None:
        self.draft_id = draft_id
        super().__init__(f"Draft not found: {draft_id}")


class NoOfferError(ReconciliationError):
    """Raised when the effective payload does not describe an offer."""

    def __init__(self, draft_id: UUID | None = None) -> None:
        self.draft_id = draft_id
        super().__init__("No offer detected in this draft")


class DraftAlreadyApprovedError(ReconciliationError):
    def __init__(self, draft_id: UUID) -> None:
        self.draft_id = draft_id
        super().__init__("Draft already approved")


class EmailLogNotFoundError(ReconciliationError):
    def __init__(self, email_log_id: UUID) -> None:
        self.email_log_id = email_log_id
        super().__init__(f"Email log not found: {email_log_id}")


class MissingPublisherEmailError(ReconciliationError):
    def __init__(self, draft_id: UUID) -> None:
        self.draft_id = draft_id
        super().__init__("Publisher email is required to approve a draft")


class InvalidPayloadError(ReconciliationError):
    """Raised when extraction JSON cannot be read as a draft payload."""


class InvalidTransitionError(ReconciliationError):
    """Raised when a draft status change is not allowed.

    Attributes:
        current_state: The status the draft was in when the change was attempted.
        event: The lifecycle event that was rejected.
    """

    def __init__(self, current_state: DraftStatus, event: str) -> None:
        self.current_state = current_state
        self.event = event
        super().__init__(f"Cannot apply event '{event}' to a draft in state '{current_state}'")


class PersistenceError(RuntimeError):
    """Raised by storage adapters when a write inside a savepoint fails."""


class ConstraintViolationError(PersistenceError):
    """Raised when a write violates a uniqueness or check constraint."""
