"""Application orchestration entry points.

Each service opens its own unit of work. Callers (HTTP routes, CLI commands,
tests) pass a ``unit_of_work_factory`` to run against something other than the
globally started SQLAlchemy adapter.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pubrecon.adapters.extraction import effective_payload, translate_payload
from pubrecon.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    is_started,
    startup,
)
from pubrecon.config import get_reconciliation_config
from pubrecon.domain.drafts import DraftEvent, apply_event, ensure_transition, merge_payloads
from pubrecon.domain.errors import DraftNotFoundError, EmailLogNotFoundError, NoOfferError
from pubrecon.domain.model import Draft
from pubrecon.domain.ports.unit_of_work import ReconciliationUnitOfWork
from pubrecon.domain.reconciliation import (
    ActionPlan,
    ApprovalManifest,
    RegistryDefaults,
    execute_plan,
    plan_preview,
)

if TYPE_CHECKING:
    from uuid import UUID

    from pubrecon.domain.drafts import DraftPayload

UnitOfWorkFactory = Callable[[], ReconciliationUnitOfWork]


log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PreviewResult:
    plan: ActionPlan
    payload: DraftPayload

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "preview": self.plan.to_dict(),
            "extractedData": self.payload.raw,
        }


def registry_defaults() -> RegistryDefaults:
    config = get_reconciliation_config()
    return RegistryDefaults(
        currency=config.default_currency,
        payment_method=config.default_payment_method,
        publisher_source=config.publisher_source,
        confidence_score=config.default_confidence,
    )


def default_unit_of_work_factory() -> UnitOfWorkFactory:
    """Start the SQLAlchemy adapter on first use and hand out its unit of work."""

    if not is_started():
        startup()
    return SqlAlchemyReconciliationUnitOfWork


def _resolve_factory(unit_of_work_factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if unit_of_work_factory is not None:
        return unit_of_work_factory
    return default_unit_of_work_factory()


def _load_draft(uow: ReconciliationUnitOfWork, draft_id: UUID) -> Draft:
    draft = uow.repositories.drafts.get(draft_id)
    if draft is None:
        raise DraftNotFoundError(draft_id)
    return draft


def draft_summary(draft: Draft) -> dict[str, Any]:
    return {
        "id": str(draft.id),
        "status": str(draft.status),
        "emailLogId": str(draft.email_log_id) if draft.email_log_id else None,
        "publisherId": str(draft.publisher_id) if draft.publisher_id else None,
        "websiteId": str(draft.website_id) if draft.website_id else None,
        "reviewedAt": draft.reviewed_at.isoformat() if draft.reviewed_at else None,
        "rejectionReason": draft.rejection_reason,
        "editedPayload": draft.edited_payload,
    }


def preview_draft(
    draft_id: UUID,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    defaults: RegistryDefaults | None = None,
) -> PreviewResult:
    """Dry-run a draft's approval. Nothing is written."""

    effective_uow = _resolve_factory(unit_of_work_factory)
    with effective_uow() as uow:
        draft = _load_draft(uow, draft_id)
        payload = effective_payload(draft)
        if not payload.has_offer:
            raise NoOfferError(draft.id)
        plan = plan_preview(
            payload,
            repositories=uow.repositories,
            draft_id=draft.id,
            defaults=defaults or registry_defaults(),
        )
        uow.rollback()
    return PreviewResult(plan=plan, payload=payload)


def approve_draft(
    draft_id: UUID,
    *,
    force_resolve_conflicts: bool = False,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    defaults: RegistryDefaults | None = None,
) -> ApprovalManifest:
    """Apply a draft to the registry and mark it approved."""

    effective_uow = _resolve_factory(unit_of_work_factory)
    log.info("Approve requested for draft %s (force=%s)", draft_id, force_resolve_conflicts)
    with effective_uow() as uow:
        draft = _load_draft(uow, draft_id)
        payload = effective_payload(draft)
        email_log = (
            uow.repositories.email_logs.get(draft.email_log_id)
            if draft.email_log_id is not None
            else None
        )
        return execute_plan(
            draft,
            payload,
            uow=uow,
            email_log=email_log,
            force_resolve_conflicts=force_resolve_conflicts,
            defaults=defaults or registry_defaults(),
        )


def _transition(
    draft_id: UUID,
    event: DraftEvent,
    unit_of_work_factory: UnitOfWorkFactory | None,
    mutate: Callable[[Draft], None] | None = None,
) -> dict[str, Any]:
    effective_uow = _resolve_factory(unit_of_work_factory)
    with effective_uow() as uow:
        draft = _load_draft(uow, draft_id)
        ensure_transition(draft, event)
        if mutate is not None:
            mutate(draft)
        previous = draft.status
        apply_event(draft, event)
        uow.commit()
        log.info("Draft %s: %s -> %s (%s)", draft.id, previous, draft.status, event)
        return draft_summary(draft)


def start_review(
    draft_id: UUID, *, unit_of_work_factory: UnitOfWorkFactory | None = None
) -> dict[str, Any]:
    return _transition(draft_id, DraftEvent.START_REVIEW, unit_of_work_factory)


def release_draft(
    draft_id: UUID, *, unit_of_work_factory: UnitOfWorkFactory | None = None
) -> dict[str, Any]:
    """Return a draft under review to the pending queue."""

    return _transition(draft_id, DraftEvent.RELEASE, unit_of_work_factory)


def reject_draft(
    draft_id: UUID,
    reason: str | None = None,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> dict[str, Any]:
    def _record_reason(draft: Draft) -> None:
        draft.rejection_reason = reason

    return _transition(draft_id, DraftEvent.REJECT, unit_of_work_factory, _record_reason)


def edit_draft(
    draft_id: UUID,
    edited_payload: dict[str, Any],
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> dict[str, Any]:
    """Store an operator's sparse overlay; the merged result must still be a valid payload."""

    def _store_overlay(draft: Draft) -> None:
        translate_payload(merge_payloads(draft.parsed_payload, edited_payload))
        draft.edited_payload = dict(edited_payload)

    return _transition(draft_id, DraftEvent.EDIT, unit_of_work_factory, _store_overlay)


def ingest_draft(
    parsed_payload: dict[str, Any],
    *,
    email_log_id: UUID | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> dict[str, Any]:
    """Store an extraction result as a new pending draft."""

    translate_payload(parsed_payload)
    effective_uow = _resolve_factory(unit_of_work_factory)
    with effective_uow() as uow:
        if email_log_id is not None and uow.repositories.email_logs.get(email_log_id) is None:
            raise EmailLogNotFoundError(email_log_id)
        draft = Draft(parsed_payload=dict(parsed_payload), email_log_id=email_log_id)
        uow.repositories.drafts.add(draft)
        uow.commit()
        log.info("Ingested draft %s (email log %s)", draft.id, email_log_id)
        return draft_summary(draft)
