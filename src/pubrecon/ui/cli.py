# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Any
from uuid import UUID

from dotenv import load_dotenv

from pubrecon.app import (
    approve_draft,
    ingest_draft,
    preview_draft,
    reject_draft,
    release_draft,
    start_review,
)
from pubrecon.config import ConfigurationError, configure_logging
from pubrecon.domain.errors import ReconciliationError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from pubrecon.app import UnitOfWorkFactory

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile extracted publisher drafts")
    subparsers = parser.add_subparsers(dest="command", required=True)

    preview = subparsers.add_parser("preview", help="Show what approving a draft would do")
    preview.add_argument("draft_id", type=str, help="Draft id")

    approve = subparsers.add_parser("approve", help="Apply a draft to the registry")
    approve.add_argument("draft_id", type=str, help="Draft id")
    approve.add_argument(
        "--force-resolve-conflicts",
        action="store_true",
        help="Overwrite stored prices even when the change is significant",
    )

    review = subparsers.add_parser("review", help="Mark a draft as under review")
    review.add_argument("draft_id", type=str, help="Draft id")

    release = subparsers.add_parser("release", help="Return a reviewed draft to the queue")
    release.add_argument("draft_id", type=str, help="Draft id")

    reject = subparsers.add_parser("reject", help="Reject a draft")
    reject.add_argument("draft_id", type=str, help="Draft id")
    reject.add_argument("--reason", type=str, help="Optional rejection reason")

    ingest = subparsers.add_parser("ingest", help="Store an extraction payload as a new draft")
    ingest.add_argument("payload", type=Path, help="Path to a JSON extraction payload")
    ingest.add_argument(
        "--email-log-id",
        type=str,
        help="Email log the payload was extracted from",
    )

    return parser.parse_args(list(argv))


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _load_payload(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ValueError(f"Cannot read payload {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Payload {path} must be a JSON object")
    return data


def _run(
    args: argparse.Namespace, unit_of_work_factory: UnitOfWorkFactory | None
) -> dict[str, Any]:
    command = args.command
    if command == "ingest":
        email_log_id = _parse_uuid(args.email_log_id) if args.email_log_id else None
        return ingest_draft(
            _load_payload(args.payload),
            email_log_id=email_log_id,
            unit_of_work_factory=unit_of_work_factory,
        )

    draft_id = _parse_uuid(args.draft_id)
    if command == "preview":
        return preview_draft(draft_id, unit_of_work_factory=unit_of_work_factory).to_dict()
    if command == "approve":
        manifest = approve_draft(
            draft_id,
            force_resolve_conflicts=args.force_resolve_conflicts,
            unit_of_work_factory=unit_of_work_factory,
        )
        return manifest.to_dict()
    if command == "review":
        return start_review(draft_id, unit_of_work_factory=unit_of_work_factory)
    if command == "release":
        return release_draft(draft_id, unit_of_work_factory=unit_of_work_factory)
    if command == "reject":
        return reject_draft(draft_id, args.reason, unit_of_work_factory=unit_of_work_factory)
    raise ValueError(f"Unsupported command: {command}")


def main(
    argv: Sequence[str] | None = None,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    try:
        result = _run(parsed_args, unit_of_work_factory)
    except (ValueError, ReconciliationError, ConfigurationError) as exc:
        log.error("%s failed: %s", parsed_args.command, exc)  # noqa: TRY400
        print(json.dumps({"error": str(exc)}, indent=2))
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)

    print(json.dumps(result, indent=2, default=str))


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
