"""vds MCP Server.

The implementation lives in `vds.mcp._app` (shared state) and
`vds.mcp.tools.*` (tool functions); this module imports the tools so
they register, and provides the console-script entry point.

Tags: mcp, server, ai-tools, protocol
Doc-Types: API_REFERENCE, TECHNICAL_DESIGN
"""

from __future__ import annotations

from vds.core.settings import get_settings
from vds.core.transports.mcp import run_vds_mcp
from vds.mcp._app import AppContext, get_runtime, lifespan, mcp, set_runtime  # noqa: F401

# Import tools to trigger @mcp.tool() registration
from vds.mcp.tools.catalog import (  # noqa: F401
    create_attribute_type,
    create_linkage_type,
    delete_attribute_type,
    delete_linkage_type,
    list_attribute_types,
    list_linkage_types,
)
from vds.mcp.tools.history import list_history  # noqa: F401
from vds.mcp.tools.items import (  # noqa: F401
    create_item,
    delete_item,
    get_item,
    list_items,
    update_item,
)
from vds.mcp.tools.linkages import (  # noqa: F401
    create_linkages,
    list_linkages,
    remove_linkages,
)
from vds.mcp.tools.schema import get_schema, set_schema  # noqa: F401


def create_server():
    """Create and return the MCP server instance."""
    return mcp


def run(argv: list[str] | None = None):
    """Run the MCP server (entry point for console script)."""
    settings = get_settings()
    run_vds_mcp(
        mcp,
        default_port=settings.mcp_port,
        host=settings.host,
        log_level=settings.log_level,
        argv=argv,
    )


if __name__ == "__main__":
    run()
