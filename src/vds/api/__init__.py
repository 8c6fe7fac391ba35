"""
REST API layer for vds.

Provides a FastAPI application factory whose routers delegate to the
operations layer (``vds.ops``).  Routers handle only HTTP concerns:
serialisation, ``If-Match`` / ``ETag`` version headers, error mapping
and request context.

Quick start::

    from vds.api import create_app

    app = create_app()  # ready for uvicorn

Tags:
    vds, api, REST, FastAPI, transport-layer

Doc-Types:
    api-reference
"""

from vds.api.app import create_app

__all__ = ["create_app"]
