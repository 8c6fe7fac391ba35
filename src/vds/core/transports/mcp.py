"""MCP server scaffold for vds.

Wraps FastMCP construction and the console-script entry point so the tool
modules only register tools on the returned instance.

Usage::

    from vds.core.transports.mcp import create_vds_mcp, run_vds_mcp

    mcp = create_vds_mcp(
        name="vds",
        instructions="Versioned items, attributes and linkages ...",
        lifespan=app_lifespan,
    )

    @mcp.tool()
    async def get_item(...): ...

    def run():
        run_vds_mcp(mcp, default_port=8100)
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable, Sequence
from typing import Any

from mcp.server.fastmcp import FastMCP

from vds.core.logging import configure_logging, get_logger


def create_vds_mcp(
    name: str,
    instructions: str,
    lifespan: Callable[..., Any],
) -> FastMCP:
    """Create a FastMCP server instance.

    Parameters
    ----------
    name : str
        MCP server name.
    instructions : str
        Natural language description of the server's capabilities.
    lifespan : async context manager
        Lifespan factory run around the server's lifetime.
    """
    return FastMCP(
        name,
        instructions=instructions,
        lifespan=lifespan,
    )


def parse_transport_args(
    argv: Sequence[str] | None = None,
    *,
    default_port: int = 8100,
) -> argparse.Namespace:
    """Parse ``--transport`` and ``--port``; unknown arguments are ignored."""
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument(
        "--transport", "-t",
        choices=["stdio", "http", "streamable-http"],
        default="stdio",
    )
    parser.add_argument("--port", "-p", type=int, default=default_port)
    args, _unknown = parser.parse_known_args(list(argv) if argv is not None else sys.argv[1:])
    return args


def run_vds_mcp(
    mcp: FastMCP,
    *,
    default_port: int = 8100,
    host: str = "0.0.0.0",
    log_level: str = "INFO",
    argv: Sequence[str] | None = None,
) -> None:
    """Standard entry point for the MCP console script.

    Starts the server in stdio mode (default) or streamable-http mode.
    Logs always go to stderr so they never interleave with stdio frames.
    """
    args = parse_transport_args(argv, default_port=default_port)
    configure_logging(level=log_level, service=mcp.name, stream=sys.stderr)
    logger = get_logger("vds.mcp")

    if args.transport in ("http", "streamable-http"):
        mcp.settings.host = host
        mcp.settings.port = args.port
        logger.info("mcp_starting", transport="streamable-http", port=args.port)
        mcp.run(transport="streamable-http")
    else:
        logger.info("mcp_starting", transport="stdio")
        mcp.run(transport="stdio")
