"""
FastAPI application factory.

``create_app()`` wires middleware, routers, error handlers, and the
lifespan that owns the :class:`~vds.runtime.VdsRuntime`.

Startup order (nothing is served before it completes):
    1. build engine, session pool and mutation orchestrator
    2. migrate and commit the schema on trunk
    3. sweep orphaned mutation branches

Tags:
    vds, api, app-factory, composition-root, FastAPI

Doc-Types:
    api-reference
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vds import __version__
from vds.api.middleware.errors import unhandled_exception_handler, vds_error_handler
from vds.api.middleware.request_id import RequestIDMiddleware
from vds.core.errors import VdsError
from vds.core.health import HealthCheck, create_health_router
from vds.core.logging import get_logger
from vds.core.settings import VdsSettings, get_settings
from vds.runtime import VdsRuntime

log = get_logger("vds.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup / shutdown hooks."""
    settings: VdsSettings = app.state.settings
    owned = app.state.runtime is None

    if owned:
        runtime = VdsRuntime.from_settings(settings)
        log.info("vds API starting", version=app.version, database=settings.dolt_database)
        try:
            await asyncio.to_thread(runtime.start)
        except Exception:
            runtime.close()
            raise
        app.state.runtime = runtime

    yield

    if owned:
        app.state.runtime.close()
        app.state.runtime = None
    log.info("vds API shutting down")


def create_app(
    *,
    settings: VdsSettings | None = None,
    runtime: VdsRuntime | None = None,
) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    Parameters
    ----------
    settings : VdsSettings | None
        Override settings (useful for testing).  When ``None`` the cached
        singleton from :func:`get_settings` is used.
    runtime : VdsRuntime | None
        Pre-built runtime.  When given, the lifespan neither bootstraps
        nor closes it.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc",
        openapi_url=f"{settings.api_prefix}/openapi.json",
    )

    app.state.settings = settings
    app.state.runtime = runtime
    app.dependency_overrides[get_settings] = lambda: settings

    # ── Middleware (outermost → innermost) ────────────────────────────
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["ETag", "X-Request-ID", "Retry-After"],
    )

    # ── Exception handlers ───────────────────────────────────────────
    app.add_exception_handler(VdsError, vds_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # ── Routers ──────────────────────────────────────────────────────
    from vds.api.routers import (
        attribute_types,
        attributes,
        history,
        items,
        linkage_types,
        linkages,
        schema,
    )

    async def check_store() -> dict:
        current = app.state.runtime
        if current is None:
            raise RuntimeError("runtime not started")
        return await asyncio.to_thread(current.health)

    # Health endpoints at root level (no prefix) for container healthchecks
    app.include_router(
        create_health_router(
            "vds",
            version=__version__,
            checks=[HealthCheck("dolt", check_store)],
        )
    )

    prefix = settings.api_prefix
    app.include_router(items.router, prefix=prefix, tags=["items"])
    app.include_router(attributes.router, prefix=prefix, tags=["attributes"])
    app.include_router(attribute_types.router, prefix=prefix, tags=["attribute-types"])
    app.include_router(linkage_types.router, prefix=prefix, tags=["linkage-types"])
    app.include_router(linkages.router, prefix=prefix, tags=["linkages"])
    app.include_router(schema.router, prefix=prefix, tags=["schema"])
    app.include_router(history.router, prefix=prefix, tags=["history"])

    return app
