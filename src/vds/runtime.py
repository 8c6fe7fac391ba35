"""
Process runtime — the composition root shared by the API, MCP server and CLI.

Builds, in order::

    engine ─▶ SessionPool ─▶ BranchLifecycleManager
                         ─▶ AdvisoryMergeLock ─▶ MergeCoordinator
                         ─▶ BranchedMutationOrchestrator

``start()`` must complete before any request is accepted: it migrates and
commits the schema on trunk, then sweeps orphaned mutation branches.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy.engine import Engine

from vds.branching import (
    AdvisoryMergeLock,
    BranchedMutationOrchestrator,
    BranchLifecycleManager,
    MergeCoordinator,
    MergeLock,
    sweep_at_startup,
)
from vds.core.errors import VdsError
from vds.core.logging import get_logger
from vds.core.settings import VdsSettings
from vds.db.migrate import bootstrap_trunk
from vds.ops.context import OperationContext
from vds.store.engine import SessionPool, create_store_engine
from vds.store.protocols import SessionSource

logger = get_logger(__name__)


@dataclass
class VdsRuntime:
    settings: VdsSettings
    sessions: SessionSource
    lifecycle: BranchLifecycleManager
    coordinator: MergeCoordinator
    orchestrator: BranchedMutationOrchestrator
    engine: Engine | None = None
    started: bool = False

    @classmethod
    def assemble(
        cls,
        settings: VdsSettings,
        sessions: SessionSource,
        *,
        merge_lock: MergeLock | None = None,
        engine: Engine | None = None,
    ) -> VdsRuntime:
        """Wire the mutation protocol over an existing session source."""
        lifecycle = BranchLifecycleManager(
            trunk=settings.trunk_branch,
            prefix=settings.branch_prefix,
        )
        coordinator = MergeCoordinator(
            merge_lock or AdvisoryMergeLock(settings.merge_lock_name),
            lock_timeout_ms=settings.merge_lock_timeout_ms,
        )
        orchestrator = BranchedMutationOrchestrator(sessions, lifecycle, coordinator)
        return cls(
            settings=settings,
            sessions=sessions,
            lifecycle=lifecycle,
            coordinator=coordinator,
            orchestrator=orchestrator,
            engine=engine,
        )

    @classmethod
    def from_settings(cls, settings: VdsSettings) -> VdsRuntime:
        engine = create_store_engine(
            settings.database_url,
            echo=settings.debug,
            pool_size=settings.pool_size,
            max_overflow=settings.pool_max_overflow,
            pool_timeout=settings.pool_timeout_s,
        )
        pool = SessionPool(engine, trunk=settings.trunk_branch)
        return cls.assemble(settings, pool, engine=engine)

    def start(self) -> None:
        """Bootstrap trunk and sweep orphans.  Idempotent."""
        if self.started:
            return
        with self.sessions.session() as session:
            bootstrap_trunk(session, self.settings.trunk_branch)
        if self.settings.sweep_on_startup:
            self.sweep()
        self.started = True
        logger.info("runtime_started", trunk=self.settings.trunk_branch)

    def sweep(self) -> int | None:
        """Delete orphaned mutation branches.

        Returns the number deleted, or None when the sweep itself failed;
        the failure is logged and startup continues.
        """
        try:
            return sweep_at_startup(self.sessions, self.lifecycle)
        except VdsError as exc:
            logger.error("orphan_sweep_failed", error=str(exc), code=exc.code)
            return None

    def context(self, *, caller: str, request_id: str | None = None, **metadata: Any) -> OperationContext:
        kwargs: dict[str, Any] = {"caller": caller, "metadata": metadata}
        if request_id:
            kwargs["request_id"] = request_id
        return OperationContext(
            sessions=self.sessions,
            mutations=self.orchestrator,
            **kwargs,
        )

    def health(self) -> dict[str, Any]:
        """Trunk head and pool usage; raises when the store is unreachable."""
        with self.sessions.session() as session:
            head = session.head()
        stats = self.sessions.stats() if isinstance(self.sessions, SessionPool) else {}
        return {"head": head, "pool": stats}

    def close(self) -> None:
        if isinstance(self.sessions, SessionPool):
            self.sessions.dispose()
        logger.info("runtime_closed")
