from __future__ import annotations

import pytest

from pubrecon.domain.drafts import (
    TERMINAL_STATES,
    DraftEvent,
    apply_event,
    ensure_transition,
    next_status,
)
from pubrecon.domain.errors import DraftAlreadyApprovedError, InvalidTransitionError
from pubrecon.domain.model import Draft, DraftStatus


def _draft(status: DraftStatus = DraftStatus.PENDING) -> Draft:
    return Draft(parsed_payload={"hasOffer": True}, status=status)


@pytest.mark.parametrize(
    ("current", "event", "expected"),
    [
        (DraftStatus.PENDING, DraftEvent.START_REVIEW, DraftStatus.REVIEWING),
        (DraftStatus.PENDING, DraftEvent.EDIT, DraftStatus.REVIEWING),
        (DraftStatus.PENDING, DraftEvent.APPROVE, DraftStatus.APPROVED),
        (DraftStatus.REVIEWING, DraftEvent.RELEASE, DraftStatus.PENDING),
        (DraftStatus.REVIEWING, DraftEvent.REJECT, DraftStatus.REJECTED),
    ],
)
def test_next_status(current: DraftStatus, event: DraftEvent, expected: DraftStatus) -> None:
    assert next_status(current, event) is expected


@pytest.mark.parametrize("terminal", sorted(TERMINAL_STATES))
@pytest.mark.parametrize("event", list(DraftEvent))
def test_terminal_states_accept_no_events(terminal: DraftStatus, event: DraftEvent) -> None:
    with pytest.raises(InvalidTransitionError):
        next_status(terminal, event)


def test_release_requires_review() -> None:
    with pytest.raises(InvalidTransitionError) as exc:
        next_status(DraftStatus.PENDING, DraftEvent.RELEASE)

    assert exc.value.current_state is DraftStatus.PENDING
    assert exc.value.event == DraftEvent.RELEASE


def test_approving_approved_draft_has_dedicated_error() -> None:
    draft = _draft(DraftStatus.APPROVED)

    with pytest.raises(DraftAlreadyApprovedError, match="Draft already approved"):
        ensure_transition(draft, DraftEvent.APPROVE)


def test_apply_event_stamps_reviewed_at_on_terminal_states() -> None:
    draft = _draft()

    apply_event(draft, DraftEvent.START_REVIEW)
    assert draft.status is DraftStatus.REVIEWING
    assert draft.reviewed_at is None

    apply_event(draft, DraftEvent.REJECT)
    assert draft.status is DraftStatus.REJECTED
    assert draft.reviewed_at is not None
    assert draft.is_terminal
