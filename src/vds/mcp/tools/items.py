"""Item MCP tools."""

from __future__ import annotations

from typing import Any

from vds.mcp import _app
from vds.mcp.response import mcp_err
from vds.ops import items as item_ops

mcp = _app.mcp


@mcp.tool()
async def create_item(body: str, version: str | None = None) -> dict[str, Any]:
    """Create a new item.

    Args:
        body: Item body text
        version: Commit hash to fork the write from (trunk head if omitted)
    """
    return await _app.call_op(item_ops.create_item, body, version)


@mcp.tool()
async def list_items(
    limit: int | None = None,
    offset: int | None = None,
    filters: dict[str, str] | None = None,
    as_of: str | None = None,
) -> dict[str, Any]:
    """List items, newest first, with optional pagination and attribute filters.

    Args:
        limit: Max results
        offset: Skip N results
        filters: Attribute filters as {type_name: value}
        as_of: Commit hash or datetime for a point-in-time read
    """
    return await _app.call_op(
        item_ops.list_items,
        limit=limit,
        offset=offset,
        attr_filters=list((filters or {}).items()),
        as_of=as_of,
    )


@mcp.tool()
async def get_item(id: str, as_of: str | None = None) -> dict[str, Any]:
    """Get an item with its attributes and linkages.

    Args:
        id: Item ID
        as_of: Commit hash or datetime for a point-in-time read
    """
    return await _app.call_op(item_ops.get_item, id, as_of)


@mcp.tool()
async def update_item(
    id: str,
    body: str | None = None,
    attributes: dict[str, Any] | None = None,
    version: str | None = None,
) -> dict[str, Any]:
    """Update an item: body, attributes, or both, in one commit.

    Args:
        id: Item ID
        body: New body text
        attributes: {"set": [{"type_id", "value"}], "remove": [type_id, ...]}
        version: Commit hash to fork the write from
    """
    changes = attributes or {}
    try:
        update = item_ops.ItemUpdate(
            body=body,
            set_attributes=[
                item_ops.AttributeSet(entry["type_id"], entry["value"])
                for entry in changes.get("set") or []
            ],
            remove_attributes=list(changes.get("remove") or []),
        )
    except (KeyError, TypeError) as exc:
        return mcp_err("VALIDATION_FAILED", f"malformed attributes: {exc}")
    return await _app.call_op(item_ops.update_item, id, update, version)


@mcp.tool()
async def delete_item(id: str, version: str | None = None) -> dict[str, Any]:
    """Delete an item and its attributes and linkages.

    Args:
        id: Item ID
        version: Commit hash to fork the write from
    """
    return await _app.call_op(item_ops.delete_item, id, version)
