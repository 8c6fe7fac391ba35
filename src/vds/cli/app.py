"""
Root Typer application for the vds CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from vds import __version__

app = Typer(
    name="vds",
    help="vds: versioned items, attributes and linkages over Dolt.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"vds {__version__}")
        raise typer.Exit()


@app.callback()
def root(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """vds CLI: run the servers and maintain the store."""


# ── Sub-command registration ─────────────────────────────────────────────

from vds.cli.db import app as db_app  # noqa: E402
from vds.cli.serve import mcp, serve  # noqa: E402

app.command("serve", help="Start the REST API server.")(serve)
app.command("mcp", help="Start the MCP server.")(mcp)
app.add_typer(db_app, name="db", help="Schema and branch maintenance.")


def main() -> None:
    """Console-script entry point."""
    app()
