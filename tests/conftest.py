"""
Shared pytest fixtures for vds tests.

This module provides:
- ``fake_store`` / ``fake_pool``: in-memory versioned store and pool
- ``lifecycle`` / ``coordinator`` / ``orchestrator``: the branching stack
  wired over the fake pool with a short merge-lock timeout
- ``sqlite_store`` / ``op_context``: SQLite-backed operations context
- ``sqlite_conn``: a rolled-back connection for query tests
- ``sqlite_runtime``: a started runtime over SQLite for the front ends
- ``api_client``: a TestClient over ``sqlite_runtime``
- ``settings``: settings isolated from the developer's environment
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Connection

from tests._support.fake_store import FakeSessionPool, FakeVersionedStore
from tests._support.sqlite_store import SqliteStore
from vds.api import create_app
from vds.branching import (
    AdvisoryMergeLock,
    BranchedMutationOrchestrator,
    BranchLifecycleManager,
    MergeCoordinator,
    ProcessMergeLock,
)
from vds.core.logging import clear_context
from vds.core.settings import VdsSettings, get_settings
from vds.ops.context import OperationContext
from vds.runtime import VdsRuntime

TEST_LOCK_TIMEOUT_MS = 300


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Strip VDS_/DOLT_ variables and reset cached settings and log context."""
    import os

    for key in list(os.environ):
        if key.startswith(("VDS_", "DOLT_")):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    clear_context()
    yield
    get_settings.cache_clear()
    clear_context()


@pytest.fixture
def settings() -> VdsSettings:
    return VdsSettings(_env_file=None, sweep_on_startup=False)


# ── Branching stack over the fake store ──────────────────────────────────


@pytest.fixture
def fake_store() -> FakeVersionedStore:
    return FakeVersionedStore()


@pytest.fixture
def fake_pool(fake_store: FakeVersionedStore) -> FakeSessionPool:
    return FakeSessionPool(fake_store, size=8, timeout_s=1.0)


@pytest.fixture
def lifecycle() -> BranchLifecycleManager:
    return BranchLifecycleManager(trunk="main", prefix="vds-mut-")


@pytest.fixture
def coordinator() -> MergeCoordinator:
    return MergeCoordinator(AdvisoryMergeLock("vds_merge"), lock_timeout_ms=TEST_LOCK_TIMEOUT_MS)


@pytest.fixture
def orchestrator(
    fake_pool: FakeSessionPool,
    lifecycle: BranchLifecycleManager,
    coordinator: MergeCoordinator,
) -> BranchedMutationOrchestrator:
    return BranchedMutationOrchestrator(fake_pool, lifecycle, coordinator)


# ── Operations over SQLite ───────────────────────────────────────────────


@pytest.fixture
def sqlite_store() -> Iterator[SqliteStore]:
    store = SqliteStore()
    yield store
    store.engine.dispose()


@pytest.fixture
def op_context(sqlite_store: SqliteStore) -> OperationContext:
    return OperationContext(sessions=sqlite_store, mutations=sqlite_store, caller="test")


@pytest.fixture
def sqlite_conn(sqlite_store: SqliteStore) -> Iterator[Connection]:
    """A connection inside one transaction, rolled back after the test."""
    with sqlite_store.engine.connect() as conn:
        trans = conn.begin()
        yield conn
        trans.rollback()


@pytest.fixture
def sqlite_runtime(settings: VdsSettings, sqlite_store: SqliteStore) -> VdsRuntime:
    """Runtime over SQLite; already started so nothing bootstraps."""
    return VdsRuntime(
        settings=settings,
        sessions=sqlite_store,
        lifecycle=BranchLifecycleManager(),
        coordinator=MergeCoordinator(ProcessMergeLock()),
        orchestrator=sqlite_store,
        started=True,
    )


@pytest.fixture
def api_client(settings: VdsSettings, sqlite_runtime: VdsRuntime) -> Iterator[TestClient]:
    with TestClient(create_app(settings=settings, runtime=sqlite_runtime)) as client:
        yield client
