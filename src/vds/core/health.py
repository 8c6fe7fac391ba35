"""Health check endpoints for the vds API.

Provides:

- **Response models**: ``HealthResponse``, ``CheckResult``, ``LivenessResponse``.
- **``HealthCheck``**: one dependency check (the versioned store) with
  ``required`` / ``timeout_s`` knobs.
- **``create_health_router()``**: three K8s-style endpoints,
  ``/health``, ``/health/ready`` and ``/health/live``.

Quick start::

    from vds.core.health import create_health_router, HealthCheck

    router = create_health_router(
        service_name="vds",
        version=__version__,
        checks=[HealthCheck("dolt", check_store)],
    )
    app.include_router(router)
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

# Set when the service first imports this module.
_START_TIME = time.monotonic()

Status = Literal["healthy", "degraded", "unhealthy"]


class CheckResult(BaseModel):
    """Result of a single dependency health check."""

    status: Status
    latency_ms: float | None = None
    error: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """Health envelope returned from ``GET /health``."""

    status: Status = "healthy"
    service: str = ""
    version: str = ""
    uptime_s: float = Field(default_factory=lambda: round(time.monotonic() - _START_TIME, 1))
    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    checks: dict[str, CheckResult] = Field(default_factory=dict)


class LivenessResponse(BaseModel):
    status: str = "alive"


@dataclass
class HealthCheck:
    """Declarative description of a single dependency health check.

    Parameters
    ----------
    name : str
        Dependency name (e.g. ``"dolt"``).
    check_fn : () -> Awaitable[dict | None]
        Async callable.  Returns optional details, or raises on failure.
    required : bool
        If *True* (default), failure makes the overall status ``unhealthy``.
        If *False*, failure only causes ``degraded``.
    timeout_s : float
        Max seconds to wait before the check is considered failed.
    """

    name: str
    check_fn: Callable[[], Awaitable[dict[str, Any] | None]]
    required: bool = True
    timeout_s: float = 5.0


async def run_checks(checks: list[HealthCheck]) -> dict[str, CheckResult]:
    """Execute all checks in parallel and return a mapping of name → result."""

    async def _one(hc: HealthCheck) -> tuple[str, CheckResult]:
        start = time.monotonic()
        try:
            details = await asyncio.wait_for(hc.check_fn(), timeout=hc.timeout_s)
            elapsed = (time.monotonic() - start) * 1000
            return hc.name, CheckResult(
                status="healthy",
                latency_ms=round(elapsed, 2),
                details=details or {},
            )
        except TimeoutError:
            return hc.name, CheckResult(status="unhealthy", error="timeout")
        except Exception as exc:  # noqa: BLE001
            elapsed = (time.monotonic() - start) * 1000
            return hc.name, CheckResult(
                status="unhealthy",
                latency_ms=round(elapsed, 2),
                error=str(exc)[:200],
            )

    pairs = await asyncio.gather(*[_one(hc) for hc in checks])
    return dict(pairs)


def compute_status(check_results: dict[str, CheckResult], checks: list[HealthCheck]) -> Status:
    """Derive aggregate status from individual check results."""
    required = {hc.name for hc in checks if hc.required}
    any_required_down = False
    any_optional_down = False

    for name, result in check_results.items():
        if result.status != "healthy":
            if name in required:
                any_required_down = True
            else:
                any_optional_down = True

    if any_required_down:
        return "unhealthy"
    if any_optional_down:
        return "degraded"
    return "healthy"


def create_health_router(
    service_name: str,
    version: str,
    checks: list[HealthCheck] | None = None,
    prefix: str = "/health",
) -> APIRouter:
    """Create an ``APIRouter`` with the health endpoints.

    ``GET {prefix}``         runs all checks; 503 when a required one fails.
    ``GET {prefix}/ready``   503 unless every check is healthy.
    ``GET {prefix}/live``    always 200.
    """
    router = APIRouter(tags=["health"])
    _checks: list[HealthCheck] = checks or []

    def _make_response(status: Status, check_results: dict[str, CheckResult]) -> HealthResponse:
        return HealthResponse(
            status=status,
            service=service_name,
            version=version,
            checks=check_results,
        )

    @router.get(prefix, response_model=HealthResponse)
    async def health() -> JSONResponse:
        check_results = await run_checks(_checks)
        status = compute_status(check_results, _checks)
        body = _make_response(status, check_results)
        code = 503 if status == "unhealthy" else 200
        return JSONResponse(content=body.model_dump(), status_code=code)

    @router.get(f"{prefix}/ready", response_model=HealthResponse)
    async def readiness() -> JSONResponse:
        check_results = await run_checks(_checks)
        status = compute_status(check_results, _checks)
        code = 503 if status != "healthy" else 200
        body = _make_response(status, check_results)
        return JSONResponse(content=body.model_dump(), status_code=code)

    @router.get(f"{prefix}/live", response_model=LivenessResponse)
    async def liveness() -> LivenessResponse:
        return LivenessResponse()

    return router
