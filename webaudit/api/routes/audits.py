"""Audit endpoints: run an audit, poll a record, push status updates."""

from __future__ import annotations

import logging
import traceback
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError as PydanticValidationError

from webaudit.api.deps import get_audit_store, get_enricher, get_settings
from webaudit.config.settings import Config
from webaudit.core.ai import Enricher
from webaudit.core.audit import enrich_audit, launch_config_from, run_audit
from webaudit.errors.exceptions import AuditError, AuditTimeoutError, ValidationError
from webaudit.schemas.audit import AuditResults, AuditUpdate
from webaudit.schemas.common import ValidationIssue
from webaudit.services.store import AuditStore
from webaudit.services.validators import issues_from_pydantic, validate_audit_request

logger = logging.getLogger(__name__)

router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


def _error_response(
    status_code: int, message: str, config: Config, exc: BaseException | None = None
) -> JSONResponse:
    """Error body; the stack trace is only attached outside production."""
    content: dict[str, Any] = {"error": message}
    if exc is not None and not config.is_production:
        content["stack"] = "".join(traceback.format_exception(exc))
    return JSONResponse(status_code=status_code, content=content, headers=CORS_HEADERS)


def _validation_response(issues: list[ValidationIssue]) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "error": "Validation failed",
            "details": [issue.model_dump() for issue in issues],
        },
        headers=CORS_HEADERS,
    )


def _results_response(results: AuditResults) -> JSONResponse:
    return JSONResponse(
        content=results.model_dump(mode="json", by_alias=True), headers=CORS_HEADERS
    )


async def _read_json(req: Request) -> tuple[Any, JSONResponse | None]:
    """Parse the request body, or build the 400 response for a malformed one."""
    try:
        return await req.json(), None
    except ValueError:
        return None, _validation_response(
            [ValidationIssue(path="", message="Request body must be valid JSON")]
        )


@router.options("/audit")
async def audit_preflight() -> Response:
    """CORS preflight for the audit endpoint."""
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post("/audit", response_model=AuditResults)
async def create_audit(
    req: Request,
    background_tasks: BackgroundTasks,
    store: AuditStore = Depends(get_audit_store),  # noqa: B008
    enricher: Enricher = Depends(get_enricher),  # noqa: B008
    config: Config = Depends(get_settings),  # noqa: B008
) -> Response:
    """
    Run an audit for the given URL and return the scored record.

    AI enrichment is scheduled after the response is sent; poll
    GET /api/audit/{audit_id} for its outcome.
    """
    # Periodic cleanup of expired records
    store.cleanup_expired()

    payload, error_response = await _read_json(req)
    if error_response is not None:
        return error_response

    try:
        audit_request = validate_audit_request(payload)
        results = await run_audit(audit_request, launch_config_from(config))

    except ValidationError as e:
        return _validation_response(e.issues)
    except AuditTimeoutError as e:
        logger.warning(f"Audit timed out: {e}")
        return _error_response(504, str(e), config, e)
    except AuditError as e:
        logger.error(f"Audit failed: {e}")
        return _error_response(500, str(e), config, e)
    except Exception as e:
        logger.exception(f"Unexpected error running audit: {e}")
        return _error_response(500, f"Unexpected error: {e}", config, e)

    store.create(results)
    background_tasks.add_task(enrich_audit, results.id, results, enricher, store)
    return _results_response(results)


@router.get("/audit/{audit_id}", response_model=AuditResults)
async def get_audit(
    audit_id: str,
    store: AuditStore = Depends(get_audit_store),  # noqa: B008
) -> Response:
    """Get an audit record, including the AI analysis status."""
    results = store.get(audit_id)
    if results is None:
        return JSONResponse(
            status_code=404, content={"error": "Audit not found or expired"}, headers=CORS_HEADERS
        )
    return _results_response(results)


@router.patch("/audit/{audit_id}", response_model=AuditResults)
async def update_audit(
    audit_id: str,
    req: Request,
    store: AuditStore = Depends(get_audit_store),  # noqa: B008
) -> Response:
    """
    Apply a partial update (status and/or aiAnalysis) to an audit record.

    A supplied aiAnalysis replaces the stored one.
    """
    payload, error_response = await _read_json(req)
    if error_response is not None:
        return error_response

    try:
        update = AuditUpdate.model_validate(payload)
    except PydanticValidationError as e:
        return _validation_response(issues_from_pydantic(e))

    changes = {
        name: getattr(update, name)
        for name in update.model_fields_set
        if getattr(update, name) is not None
    }
    results = store.update(audit_id, changes)
    if results is None:
        return JSONResponse(
            status_code=404, content={"error": "Audit not found or expired"}, headers=CORS_HEADERS
        )
    return _results_response(results)
