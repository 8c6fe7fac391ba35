"""
CLI utility helpers: consoles and runtime management.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import typer
from rich.console import Console

from vds.core.errors import VdsError
from vds.core.settings import VdsSettings, get_settings
from vds.runtime import VdsRuntime

console = Console()
err_console = Console(stderr=True)


@contextmanager
def open_runtime(settings: VdsSettings | None = None) -> Iterator[VdsRuntime]:
    """A runtime for one command; store errors exit with status 1."""
    runtime = VdsRuntime.from_settings(settings or get_settings())
    try:
        yield runtime
    except VdsError as exc:
        err_console.print(f"[bold red]Error[/bold red] ({exc.code}): {exc.message}")
        raise typer.Exit(code=1) from exc
    finally:
        runtime.close()
