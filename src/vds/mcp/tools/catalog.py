"""Attribute-type and linkage-type MCP tools."""

from __future__ import annotations

from typing import Any

from vds.mcp import _app
from vds.ops import attribute_types as attribute_type_ops
from vds.ops import linkage_types as linkage_type_ops

mcp = _app.mcp


@mcp.tool()
async def list_attribute_types(as_of: str | None = None) -> dict[str, Any]:
    """List all attribute types by name."""
    return await _app.call_op(attribute_type_ops.list_attribute_types, as_of)


@mcp.tool()
async def create_attribute_type(name: str, version: str | None = None) -> dict[str, Any]:
    """Create a new attribute type.

    Args:
        name: Type name (unique)
        version: Commit hash to fork the write from
    """
    return await _app.call_op(attribute_type_ops.create_attribute_type, name, version)


@mcp.tool()
async def delete_attribute_type(id: str, version: str | None = None) -> dict[str, Any]:
    """Delete an attribute type (fails with IN_USE while attributes reference it)."""
    return await _app.call_op(attribute_type_ops.delete_attribute_type, id, version)


@mcp.tool()
async def list_linkage_types(as_of: str | None = None) -> dict[str, Any]:
    """List all linkage types by name."""
    return await _app.call_op(linkage_type_ops.list_linkage_types, as_of)


@mcp.tool()
async def create_linkage_type(name: str, version: str | None = None) -> dict[str, Any]:
    """Create a new linkage type.

    Args:
        name: Type name (unique)
        version: Commit hash to fork the write from
    """
    return await _app.call_op(linkage_type_ops.create_linkage_type, name, version)


@mcp.tool()
async def delete_linkage_type(id: str, version: str | None = None) -> dict[str, Any]:
    """Delete a linkage type (fails with IN_USE while linkages reference it)."""
    return await _app.call_op(linkage_type_ops.delete_linkage_type, id, version)
