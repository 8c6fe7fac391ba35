"""
vds — versioned data store.

Generic items with typed attributes and typed linkages, stored in a
version-controlled SQL database (Dolt).  Every write lands as one commit
on the trunk through a short-lived mutation branch, which gives audit
history and point-in-time reads for free.

Packages:
    core       errors, logging, settings, MCP transport scaffold
    store      pooled dedicated sessions over the versioned store
    db         tables, migrations and plain CRUD queries
    branching  branch-per-mutation protocol (lifecycle, merge, sweep)
    ops        operations shared by the REST and MCP front ends
    api        FastAPI application
    mcp        FastMCP tool server
    cli        typer command line
"""

__version__ = "0.3.0"
