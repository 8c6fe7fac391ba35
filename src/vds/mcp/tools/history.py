"""History MCP tools."""

from __future__ import annotations

from typing import Any

from vds.mcp import _app
from vds.ops import history as history_ops

mcp = _app.mcp


@mcp.tool()
async def list_history(limit: int = 50, offset: int = 0, item_id: str | None = None) -> dict[str, Any]:
    """List trunk commits, newest first.

    Args:
        limit: Max commits
        offset: Skip N commits
        item_id: Only commits that touched this item
    """
    if item_id:
        return await _app.call_op(history_ops.item_history, item_id, limit=limit, offset=offset)
    return await _app.call_op(history_ops.list_history, limit=limit, offset=offset)
