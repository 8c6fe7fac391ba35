"""
Merge coordinator — serialised convergence of a mutation branch into trunk.

The merge lock is the only serialisation point in the write path.  Branch
creation, the caller's unit of work and the branch commit all run in
parallel across mutations; only the window below is exclusive::

    acquire merge lock (bounded wait) ──timeout──▶ LockTimeoutError
        │
        ▼
    merge <branch> into checked-out trunk
        │
        ├── conflicts == 0 ─▶ read head ─▶ Clean(head)
        └── conflicts  > 0 ─▶ abort merge ─▶ Conflicted(n)
        │
    release merge lock (always)

Merges land in lock-arrival order, not base-version order.  Two mutations
forked from the same stale head can merge in either order; the second
conflicts only when both touched the same (row, column).

Tags:
    vds, branching, merge, advisory-lock, concurrency

Doc-Types:
    api-reference, architecture
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from vds.core.errors import LockTimeoutError
from vds.core.logging import get_logger
from vds.branching.locks import MergeLock
from vds.store.protocols import VersionedSession

logger = get_logger(__name__)

DEFAULT_LOCK_TIMEOUT_MS = 10_000


class MergeStatus(str, Enum):
    CLEAN = "clean"
    CONFLICTED = "conflicted"


@dataclass(frozen=True, slots=True)
class MergeOutcome:
    """Result of one merge attempt.  Never persisted.

    Attributes:
        status: CLEAN or CONFLICTED
        head: New trunk head (clean merges only)
        conflicts: Conflict count reported by the store
    """

    status: MergeStatus
    head: str | None = None
    conflicts: int = 0

    @classmethod
    def clean(cls, head: str) -> MergeOutcome:
        return cls(MergeStatus.CLEAN, head=head)

    @classmethod
    def conflicted(cls, conflicts: int) -> MergeOutcome:
        return cls(MergeStatus.CONFLICTED, conflicts=conflicts)

    @property
    def is_clean(self) -> bool:
        return self.status is MergeStatus.CLEAN


class MergeCoordinator:
    """Serialises merges into trunk with a store-wide lock.

    The session passed to :meth:`merge_to_trunk` must already have trunk
    checked out; the store merges into whatever line is checked out.
    """

    def __init__(self, lock: MergeLock, lock_timeout_ms: int = DEFAULT_LOCK_TIMEOUT_MS):
        self.lock = lock
        self.lock_timeout_ms = lock_timeout_ms

    def merge_to_trunk(
        self,
        session: VersionedSession,
        branch: str,
        lock_timeout_ms: int | None = None,
    ) -> MergeOutcome:
        """Merge ``branch`` into trunk under the merge lock.

        Raises:
            LockTimeoutError: the lock was not acquired within the bound;
                trunk is untouched.
            StoreError: the merge or its abort failed.  When the abort
                fails the session is tainted.
        """
        timeout_ms = self.lock_timeout_ms if lock_timeout_ms is None else lock_timeout_ms

        if not self.lock.acquire(session, timeout_ms / 1000):
            logger.warning("merge_lock_timeout", branch=branch, timeout_ms=timeout_ms)
            raise LockTimeoutError(
                f"merge lock not acquired within {timeout_ms} ms",
                retry_after=max(1, math.ceil(timeout_ms / 1000)),
            ).with_context(branch=branch, lock=self.lock.name)

        logger.debug("merge_lock_acquired", branch=branch)
        try:
            return self._merge_locked(session, branch)
        finally:
            self._release(session, branch)

    def _merge_locked(self, session: VersionedSession, branch: str) -> MergeOutcome:
        try:
            result = session.merge(branch)
        except Exception:
            # the merge may have stopped partway; the merge error is what the caller sees
            self._abort(session, branch, reraise=False)
            raise

        if result.conflicts == 0:
            head = session.head()
            logger.info(
                "merge_clean",
                branch=branch,
                version=head,
                fast_forward=result.fast_forward,
            )
            return MergeOutcome.clean(head)

        self._abort(session, branch)
        logger.info("merge_conflicted", branch=branch, conflicts=result.conflicts)
        return MergeOutcome.conflicted(result.conflicts)

    def _abort(self, session: VersionedSession, branch: str, *, reraise: bool = True) -> None:
        """Abort the pending merge, or taint the session if that fails.

        A tainted session is discarded by the pool instead of being reused
        with a half-merged trunk.

        Args:
            session: Session with trunk checked out
            branch: Branch whose merge is being abandoned (for logging)
            reraise: Raise the abort failure after tainting the session
        """
        try:
            session.abort_merge()
        except Exception as exc:
            logger.error("merge_abort_failed", branch=branch, error=str(exc))
            session.tainted = True
            if reraise:
                raise

    def _release(self, session: VersionedSession, branch: str) -> None:
        try:
            self.lock.release(session)
        except Exception as exc:  # noqa: BLE001
            logger.error("merge_lock_release_failed", branch=branch, error=str(exc))
            # a connection that may still own the lock must not go back to the pool
            session.tainted = True
