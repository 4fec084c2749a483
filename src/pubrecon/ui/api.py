"""HTTP surface for draft preview, approval, and review."""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any
from uuid import UUID

from dotenv import load_dotenv
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from pubrecon import app as services
from pubrecon.config import configure_logging
from pubrecon.domain.errors import (
    DraftNotFoundError,
    EmailLogNotFoundError,
    ReconciliationError,
)

log = logging.getLogger(__name__)


class RequestModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class DraftRequest(RequestModel):
    draft_id: str | None = Field(default=None, alias="draftId")


class ApproveRequest(DraftRequest):
    force_resolve_conflicts: bool = Field(default=False, alias="forceResolveConflicts")


class RejectRequest(RequestModel):
    reason: str | None = None


class EditRequest(RequestModel):
    edited_payload: dict[str, Any] = Field(alias="editedPayload")


class IngestRequest(RequestModel):
    parsed_payload: dict[str, Any] = Field(alias="parsedPayload")
    email_log_id: UUID | None = Field(default=None, alias="emailLogId")


def get_unit_of_work_factory() -> services.UnitOfWorkFactory:
    return services.default_unit_of_work_factory()


def _draft_id(raw: str | None) -> UUID:
    if not raw:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Draft ID required")
    try:
        return UUID(raw)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid draft ID: {raw}"
        ) from exc


router = APIRouter()


@router.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/drafts/preview")
def preview(
    body: DraftRequest,
    unit_of_work_factory: services.UnitOfWorkFactory = Depends(get_unit_of_work_factory),
) -> dict[str, Any]:
    result = services.preview_draft(
        _draft_id(body.draft_id), unit_of_work_factory=unit_of_work_factory
    )
    return result.to_dict()


@router.post("/drafts/approve")
def approve(
    body: ApproveRequest,
    unit_of_work_factory: services.UnitOfWorkFactory = Depends(get_unit_of_work_factory),
) -> dict[str, Any]:
    manifest = services.approve_draft(
        _draft_id(body.draft_id),
        force_resolve_conflicts=body.force_resolve_conflicts,
        unit_of_work_factory=unit_of_work_factory,
    )
    return manifest.to_dict()


@router.post("/drafts", status_code=status.HTTP_201_CREATED)
def ingest(
    body: IngestRequest,
    unit_of_work_factory: services.UnitOfWorkFactory = Depends(get_unit_of_work_factory),
) -> dict[str, Any]:
    return services.ingest_draft(
        body.parsed_payload,
        email_log_id=body.email_log_id,
        unit_of_work_factory=unit_of_work_factory,
    )


@router.post("/drafts/{draft_id}/review")
def review(
    draft_id: str,
    unit_of_work_factory: services.UnitOfWorkFactory = Depends(get_unit_of_work_factory),
) -> dict[str, Any]:
    return services.start_review(_draft_id(draft_id), unit_of_work_factory=unit_of_work_factory)


@router.post("/drafts/{draft_id}/release")
def release(
    draft_id: str,
    unit_of_work_factory: services.UnitOfWorkFactory = Depends(get_unit_of_work_factory),
) -> dict[str, Any]:
    return services.release_draft(_draft_id(draft_id), unit_of_work_factory=unit_of_work_factory)


@router.patch("/drafts/{draft_id}")
def edit(
    draft_id: str,
    body: EditRequest,
    unit_of_work_factory: services.UnitOfWorkFactory = Depends(get_unit_of_work_factory),
) -> dict[str, Any]:
    return services.edit_draft(
        _draft_id(draft_id), body.edited_payload, unit_of_work_factory=unit_of_work_factory
    )


@router.post("/drafts/{draft_id}/reject")
def reject(
    draft_id: str,
    body: RejectRequest,
    unit_of_work_factory: services.UnitOfWorkFactory = Depends(get_unit_of_work_factory),
) -> dict[str, Any]:
    return services.reject_draft(
        _draft_id(draft_id), body.reason, unit_of_work_factory=unit_of_work_factory
    )


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _install_error_handlers(application: FastAPI) -> None:
    @application.exception_handler(DraftNotFoundError)
    async def _not_found(_: Request, exc: DraftNotFoundError) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, "Draft not found")

    @application.exception_handler(EmailLogNotFoundError)
    async def _email_log_not_found(_: Request, exc: EmailLogNotFoundError) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, str(exc))

    @application.exception_handler(ReconciliationError)
    async def _precondition(_: Request, exc: ReconciliationError) -> JSONResponse:
        log.info("Rejected request: %s", exc)
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))

    @application.exception_handler(StarletteHTTPException)
    async def _http(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error(exc.status_code, str(exc.detail))

    @application.exception_handler(RequestValidationError)
    async def _validation(_: Request, exc: RequestValidationError) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, f"Invalid request: {exc.errors()}")


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    load_dotenv()
    configure_logging()
    yield


def create_app() -> FastAPI:
    application = FastAPI(title="pubrecon", lifespan=lifespan)

    @application.middleware("http")
    async def request_logging_middleware(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        started_at = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started_at) * 1000.0
        log.info(
            "http request method=%s path=%s status=%s duration_ms=%.2f",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    _install_error_handlers(application)
    application.include_router(router)
    return application


app = create_app()
