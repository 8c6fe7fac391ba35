"""Schema blob MCP tools."""

from __future__ import annotations

from typing import Any

from vds.mcp import _app
from vds.ops import schema as schema_ops

mcp = _app.mcp


@mcp.tool()
async def get_schema(as_of: str | None = None) -> dict[str, Any]:
    """Get the schema blob (data is null when none has been set)."""
    return await _app.call_op(schema_ops.get_schema, as_of)


@mcp.tool()
async def set_schema(body: str, version: str | None = None) -> dict[str, Any]:
    """Replace the schema blob.

    Args:
        body: Schema text
        version: Commit hash to fork the write from
    """
    return await _app.call_op(schema_ops.set_schema, body, version)
