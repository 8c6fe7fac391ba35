"""vds command-line interface (typer)."""
