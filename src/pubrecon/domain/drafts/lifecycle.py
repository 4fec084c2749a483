"""Transition map for the draft review lifecycle."""

from __future__ import annotations

from enum import StrEnum

from pubrecon.domain.errors import DraftAlreadyApprovedError, InvalidTransitionError
from pubrecon.domain.model import Draft, DraftStatus, utc_now


class DraftEvent(StrEnum):
    """Operator actions that move a draft between statuses."""

    START_REVIEW = "start_review"
    EDIT = "edit"
    RELEASE = "release"
    APPROVE = "approve"
    REJECT = "reject"


# Any (status, event) pair not listed here is an invalid transition.
TRANSITIONS: dict[tuple[DraftStatus, DraftEvent], DraftStatus] = {
    (DraftStatus.PENDING, DraftEvent.START_REVIEW): DraftStatus.REVIEWING,
    (DraftStatus.PENDING, DraftEvent.EDIT): DraftStatus.REVIEWING,
    (DraftStatus.PENDING, DraftEvent.APPROVE): DraftStatus.APPROVED,
    (DraftStatus.PENDING, DraftEvent.REJECT): DraftStatus.REJECTED,
    (DraftStatus.REVIEWING, DraftEvent.START_REVIEW): DraftStatus.REVIEWING,
    (DraftStatus.REVIEWING, DraftEvent.EDIT): DraftStatus.REVIEWING,
    (DraftStatus.REVIEWING, DraftEvent.RELEASE): DraftStatus.PENDING,
    (DraftStatus.REVIEWING, DraftEvent.APPROVE): DraftStatus.APPROVED,
    (DraftStatus.REVIEWING, DraftEvent.REJECT): DraftStatus.REJECTED,
}

TERMINAL_STATES: frozenset[DraftStatus] = frozenset({DraftStatus.APPROVED, DraftStatus.REJECTED})


def next_status(current: DraftStatus, event: DraftEvent) -> DraftStatus:
    """Return the status ``event`` leads to from ``current``."""

    target = TRANSITIONS.get((current, event))
    if target is None:
        raise InvalidTransitionError(current, event)
    return target


def ensure_transition(draft: Draft, event: DraftEvent) -> DraftStatus:
    """Like :func:`next_status`, but approving an approved draft gets its own error."""

    if draft.status == DraftStatus.APPROVED and event == DraftEvent.APPROVE:
        raise DraftAlreadyApprovedError(draft.id)
    return next_status(draft.status, event)


def apply_event(draft: Draft, event: DraftEvent) -> DraftStatus:
    """Move ``draft`` along ``event`` and stamp its timestamps."""

    target = ensure_transition(draft, event)
    draft.status = target
    now = utc_now()
    draft.updated_at = now
    if target in TERMINAL_STATES:
        draft.reviewed_at = now
    return target
