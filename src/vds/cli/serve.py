"""
CLI: ``vds serve`` and ``vds mcp``: start the REST API or the MCP server.
"""

from __future__ import annotations

import typer

from vds.cli.utils import console
from vds.core.logging import configure_logging
from vds.core.settings import get_settings


def serve(
    host: str | None = typer.Option(None, "--host", "-h", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on changes"),
    workers: int = typer.Option(1, "--workers", "-w", help="Number of workers"),
) -> None:
    """Start the vds REST API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.host
    port = port or settings.port
    configure_logging(level=settings.log_level, json_format=settings.json_logs)

    console.print(f"[bold green]Starting vds API[/bold green] on {host}:{port}")
    uvicorn.run(
        "vds.api:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        workers=workers,
        log_level=settings.log_level.lower(),
    )


def mcp(
    transport: str = typer.Option("stdio", "--transport", "-t", help="stdio or http"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port for http transport"),
) -> None:
    """Start the vds MCP server."""
    from vds.mcp.server import run

    argv = ["--transport", transport]
    if port is not None:
        argv += ["--port", str(port)]
    run(argv)
