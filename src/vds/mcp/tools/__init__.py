"""MCP tools package: re-exports all tool registrations."""

# Importing each module triggers @mcp.tool() registration
from vds.mcp.tools import (  # noqa: F401
    catalog,
    history,
    items,
    linkages,
    schema,
)
