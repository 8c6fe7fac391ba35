"""
CLI: ``vds db`` for schema and branch maintenance.
"""

from __future__ import annotations

import typer

from vds.cli.utils import console, err_console, open_runtime
from vds.db.migrate import bootstrap_trunk

app = typer.Typer(no_args_is_help=True)


@app.command()
def migrate() -> None:
    """Create missing tables on trunk and commit them."""
    with open_runtime() as runtime:
        with runtime.sessions.session() as session:
            version = bootstrap_trunk(session, runtime.settings.trunk_branch)
    if version is None:
        console.print("Schema already up to date")
    else:
        console.print(f"[green]Schema committed[/green] {version}")


@app.command()
def sweep() -> None:
    """Delete orphaned mutation branches left by crashed writers."""
    with open_runtime() as runtime:
        deleted = runtime.sweep()
    if deleted is None:
        err_console.print("[bold red]Error[/bold red]: orphan sweep failed, see logs")
        raise typer.Exit(code=1)
    console.print(f"Deleted {deleted} orphan branch(es)")
