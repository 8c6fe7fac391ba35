"""Linkage MCP tools."""

from __future__ import annotations

from typing import Any

from vds.mcp import _app
from vds.mcp.response import mcp_err
from vds.ops import linkages as linkage_ops

mcp = _app.mcp


@mcp.tool()
async def list_linkages(
    type_id: str | None = None,
    source_id: str | None = None,
    target_id: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
    as_of: str | None = None,
) -> dict[str, Any]:
    """List linkages with optional filters."""
    return await _app.call_op(
        linkage_ops.list_linkages,
        type_id=type_id,
        source_id=source_id,
        target_id=target_id,
        limit=limit,
        offset=offset,
        as_of=as_of,
    )


@mcp.tool()
async def create_linkages(linkages: list[dict[str, str]], version: str | None = None) -> dict[str, Any]:
    """Create one or more linkages between items in a single commit.

    Args:
        linkages: [{"source_id", "target_id", "type_id"}, ...]
        version: Commit hash to fork the write from
    """
    try:
        new = [
            linkage_ops.NewLinkage(entry["source_id"], entry["target_id"], entry["type_id"])
            for entry in linkages
        ]
    except (KeyError, TypeError) as exc:
        return mcp_err("VALIDATION_FAILED", f"malformed linkage: {exc}")
    return await _app.call_op(linkage_ops.create_linkages, new, version)


@mcp.tool()
async def remove_linkages(ids: list[str], version: str | None = None) -> dict[str, Any]:
    """Remove one or more linkages by ID in a single commit."""
    return await _app.call_op(linkage_ops.remove_linkages, ids, version)
