"""
Error-handling middleware: maps ``VdsError`` codes to RFC 7807 responses.
"""

from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from vds.api.schemas.common import ProblemDetail
from vds.core.errors import VdsError
from vds.core.logging import get_logger

logger = get_logger(__name__)

# ── Error code → HTTP status mapping ─────────────────────────────────────

ERROR_CODE_TO_STATUS: dict[str, int] = {
    "NOT_FOUND": 404,
    "VALIDATION_FAILED": 400,
    "UNKNOWN_VERSION": 400,
    "IN_USE": 409,
    "ALREADY_EXISTS": 409,
    "CONFLICT": 409,
    "LOCK_TIMEOUT": 503,
    "RESOURCE_UNAVAILABLE": 503,
    "UNAVAILABLE": 503,
    "INTERNAL": 500,
}


def status_for_error_code(code: str) -> int:
    """Resolve an error code to HTTP status, defaulting to 500."""
    return ERROR_CODE_TO_STATUS.get(code, 500)


def problem_response(
    *,
    status: int,
    title: str,
    code: str = "INTERNAL",
    detail: str = "",
    instance: str = "",
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build a RFC 7807 JSON error response."""
    body = ProblemDetail(
        title=title,
        status=status,
        code=code,
        detail=detail,
        instance=instance,
        details=details or {},
    )
    return JSONResponse(status_code=status, content=body.model_dump(), headers=headers)


async def vds_error_handler(request: Request, exc: VdsError) -> JSONResponse:
    """Translate a typed error into its problem response."""
    status = status_for_error_code(exc.code)
    headers: dict[str, str] = {}
    if exc.retry_after is not None:
        headers["Retry-After"] = str(exc.retry_after)

    log = logger.error if status >= 500 else logger.info
    log("request_failed", code=exc.code, status=status, error=exc.message, context=exc.context.to_dict())

    details: dict[str, Any] = dict(exc.details) if isinstance(exc.details, dict) else {}
    if exc.context.branch:
        details.setdefault("branch", exc.context.branch)
    if exc.context.base_version:
        details.setdefault("base_version", exc.context.base_version)

    return problem_response(
        status=status,
        title=exc.message,
        code=exc.code,
        instance=request.url.path,
        details=details,
        headers=headers or None,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions: 500 with ProblemDetail."""
    logger.exception("unhandled_exception", path=request.url.path)
    return problem_response(
        status=500,
        title="Internal Server Error",
        detail=str(exc) if request.app.state.settings.debug else "An unexpected error occurred.",
        instance=request.url.path,
    )
