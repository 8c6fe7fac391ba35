"""
FastAPI dependency injection: settings, runtime and per-request context.

Usage in routers::

    from vds.api.deps import AsOf, BaseVersion, OpContext

    @router.patch("/{item_id}")
    def update_item(item_id: str, ctx: OpContext, base_version: BaseVersion):
        ...

Tags:
    vds, api, dependency-injection, OperationContext

Doc-Types:
    api-reference
"""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Header, Query, Request

from vds.core.errors import ResourceUnavailableError
from vds.core.settings import VdsSettings, get_settings
from vds.ops.context import OperationContext
from vds.runtime import VdsRuntime

# ── Runtime (set by the lifespan) ────────────────────────────────────────


def get_runtime(request: Request) -> VdsRuntime:
    runtime = getattr(request.app.state, "runtime", None)
    if runtime is None:
        raise ResourceUnavailableError("service is still starting")
    return runtime


# ── Operation context (per-request) ──────────────────────────────────────


def get_operation_context(
    request: Request,
    runtime: Annotated[VdsRuntime, Depends(get_runtime)],
) -> OperationContext:
    """Build an :class:`OperationContext` from the current request."""
    request_id = getattr(request.state, "request_id", None) or str(uuid.uuid4())
    return runtime.context(caller="api", request_id=request_id)


# ── Version headers and query params ─────────────────────────────────────


def parse_if_match(value: str | None) -> str | None:
    """Strip weak prefix and quotes from an ``If-Match`` value."""
    if not value:
        return None
    value = value.strip()
    if value.startswith("W/"):
        value = value[2:]
    value = value.strip('"')
    if not value or value == "*":
        return None
    return value


def get_base_version(
    if_match: Annotated[str | None, Header(description="Version to fork the mutation from")] = None,
) -> str | None:
    return parse_if_match(if_match)


def get_as_of(
    as_of: Annotated[
        str | None,
        Query(description="Commit hash, branch or timestamp to read at"),
    ] = None,
) -> str | None:
    return as_of or None


# ── Convenience type aliases ─────────────────────────────────────────────

Settings = Annotated[VdsSettings, Depends(get_settings)]
Runtime = Annotated[VdsRuntime, Depends(get_runtime)]
OpContext = Annotated[OperationContext, Depends(get_operation_context)]
BaseVersion = Annotated[str | None, Depends(get_base_version)]
AsOf = Annotated[str | None, Depends(get_as_of)]
Limit = Annotated[int | None, Query(ge=1, le=1000, description="Maximum rows to return")]
Offset = Annotated[int | None, Query(ge=0, description="Rows to skip")]
