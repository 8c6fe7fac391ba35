"""Shared MCP application state: server instance, runtime, call helper.

Tags: mcp, server, internal
Doc-Types: TECHNICAL_DESIGN
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from vds.core.errors import ResourceUnavailableError, VdsError
from vds.core.logging import get_logger
from vds.core.settings import get_settings
from vds.core.transports.mcp import create_vds_mcp
from vds.mcp.response import mcp_ok, to_mcp_error
from vds.ops.context import OperationContext
from vds.ops.result import Versioned
from vds.runtime import VdsRuntime

logger = get_logger("vds.mcp")

_runtime: VdsRuntime | None = None


@dataclass
class AppContext:
    """Application context for MCP server."""

    runtime: VdsRuntime | None = None
    owned: bool = False


def set_runtime(runtime: VdsRuntime | None) -> None:
    """Install the runtime the tools run against (tests, embedding)."""
    global _runtime
    _runtime = runtime


def get_runtime() -> VdsRuntime:
    if _runtime is None:
        raise ResourceUnavailableError("vds runtime not initialized")
    return _runtime


@asynccontextmanager
async def lifespan(server: Any = None) -> AsyncIterator[AppContext]:
    """Build and bootstrap the runtime unless one was installed already."""
    ctx = AppContext(runtime=_runtime)
    if ctx.runtime is None:
        runtime = VdsRuntime.from_settings(get_settings())
        await asyncio.to_thread(runtime.start)
        set_runtime(runtime)
        ctx = AppContext(runtime=runtime, owned=True)
        logger.info("mcp_runtime_started")

    try:
        yield ctx
    finally:
        if ctx.owned and ctx.runtime is not None:
            ctx.runtime.close()
            set_runtime(None)


async def call_op(fn: Callable[..., Versioned], *args: Any, **kwargs: Any) -> dict[str, Any]:
    """Run a blocking operation in a worker thread and shape its payload.

    The merge-lock wait happens inside ``fn``; keeping it off the event
    loop lets other tool calls proceed meanwhile.
    """
    try:
        runtime = get_runtime()
        ctx: OperationContext = runtime.context(caller="mcp")
        result = await asyncio.to_thread(fn, ctx, *args, **kwargs)
    except VdsError as exc:
        logger.info("tool_failed", code=exc.code, error=exc.message)
        return to_mcp_error(exc)
    except Exception as exc:  # noqa: BLE001
        logger.exception("tool_crashed", op=getattr(fn, "__name__", repr(fn)))
        return to_mcp_error(exc)
    return mcp_ok(result)


mcp = create_vds_mcp(
    name="vds",
    instructions="""
vds versioned data store.

Every write is committed on its own branch and merged into trunk; each
result carries the trunk `version` (commit hash) it was read at or
written as.  Pass that value back as `version` on a write to fork from
it: concurrent edits to different rows merge cleanly, edits to the same
field return a CONFLICT error and should be retried on fresh data.
LOCK_TIMEOUT errors are transient; retry after a short wait.

Capabilities:
- Create, list, read, update and delete items and their attributes
- Manage attribute types and linkage types
- Link items together and remove links
- Read and replace the schema blob
- Browse commit history
""",
    lifespan=lifespan,
)
