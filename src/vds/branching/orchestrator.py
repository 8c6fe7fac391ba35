"""
Branched mutation orchestrator — the single write entry point.

Every mutation runs on its own short-lived branch over its own dedicated
session, then converges onto trunk through the merge coordinator.

Lifecycle of one invocation::

    Idle ─▶ SessionAcquired ─▶ Branched ─▶ MutationApplied
         ─▶ CommittedOnBranch ─▶ MergeAttempted ─▶ Merged | Aborted
                       │
                       └─ from any state after Branched ─▶ Cleanup ─▶ Idle
                          (checkout trunk, delete branch, release session)

Failure mapping:
    - pool exhausted               ResourceUnavailableError (nothing to clean)
    - unknown base / bad branch    BranchCreateError family
    - unit of work raised          that error, unchanged
    - merge lock not acquired      LockTimeoutError (branch discarded)
    - merge reported conflicts     ConflictError (merge aborted, branch discarded)

Cleanup failures are logged and never replace the error the caller needs
to see.  The session goes back to the pool only after its branch has been
deleted; a session that could not be moved off its branch is discarded.

Example:
    >>> def rename(session):
    ...     return items.update_item(session.conn, item_id, "new body")
    >>> outcome = orchestrator.run(f"Update item {item_id}", rename, base_version=etag)
    >>> outcome.result["body"], outcome.version
    ('new body', 'k3v8...')

Tags:
    vds, branching, orchestrator, concurrency, mutation

Doc-Types:
    api-reference, architecture
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

from vds.branching.lifecycle import BranchLifecycleManager
from vds.branching.merge import MergeCoordinator
from vds.core.errors import ConflictError, ValidationError, VdsError
from vds.core.logging import LogContext, get_logger
from vds.store.protocols import SessionSource, VersionedSession

logger = get_logger(__name__)

T = TypeVar("T")

UnitOfWork = Callable[[VersionedSession], T]


class MutationState(str, Enum):
    IDLE = "idle"
    SESSION_ACQUIRED = "session_acquired"
    BRANCHED = "branched"
    MUTATION_APPLIED = "mutation_applied"
    COMMITTED_ON_BRANCH = "committed_on_branch"
    MERGE_ATTEMPTED = "merge_attempted"
    MERGED = "merged"
    ABORTED = "aborted"


@dataclass(frozen=True, slots=True)
class MutationResult(Generic[T]):
    """Successful mutation.

    Attributes:
        result: Whatever the unit of work returned
        version: Trunk head after the merge
        base_version: Commit the mutation branch was forked from
        branch: Name of the (now deleted) mutation branch
    """

    result: T
    version: str
    base_version: str
    branch: str


@dataclass
class _Invocation:
    session: VersionedSession
    state: MutationState = MutationState.SESSION_ACQUIRED
    base_version: str | None = None
    branch: str | None = None
    on_branch: bool = False
    cleanup_errors: list[str] = field(default_factory=list)

    def advance(self, state: MutationState) -> None:
        logger.debug("mutation_state", state=state.value, previous=self.state.value)
        self.state = state


class BranchedMutationOrchestrator:
    """Runs units of work as isolated, serially merged mutations."""

    def __init__(
        self,
        sessions: SessionSource,
        lifecycle: BranchLifecycleManager,
        coordinator: MergeCoordinator,
    ) -> None:
        self.sessions = sessions
        self.lifecycle = lifecycle
        self.coordinator = coordinator

    def run(
        self,
        message: str,
        unit_of_work: UnitOfWork[T],
        base_version: str | None = None,
        *,
        lock_timeout_ms: int | None = None,
    ) -> MutationResult[T]:
        """Run ``unit_of_work`` on a fresh branch and merge it into trunk.

        Args:
            message: Commit message for the mutation
            unit_of_work: Called once with the dedicated session; its
                ``conn`` is scoped to the mutation branch
            base_version: Commit to fork from; current trunk head if None
            lock_timeout_ms: Override of the coordinator's merge-lock wait

        Returns:
            MutationResult with the unit of work's return value and the
            new trunk head

        Raises:
            ConflictError: the merge reported conflicting changes
            LockTimeoutError: the merge lock was not acquired in time
            ResourceUnavailableError: no session available
            BranchCreateError: the branch could not be created
            VdsError: anything the unit of work raised, unchanged
        """
        if not message:
            raise ValidationError("mutation message is required")

        session = self.sessions.acquire()
        invocation = _Invocation(session=session)
        try:
            return self._run(invocation, message, unit_of_work, base_version, lock_timeout_ms)
        finally:
            self._finalize(invocation)

    def _run(
        self,
        invocation: _Invocation,
        message: str,
        unit_of_work: UnitOfWork[T],
        base_version: str | None,
        lock_timeout_ms: int | None,
    ) -> MutationResult[T]:
        session = invocation.session
        # captured once; later trunk movement is resolved by the merge
        base = base_version or session.head()
        invocation.base_version = base

        branch = self.lifecycle.create_and_checkout(session, base)
        invocation.branch = branch
        invocation.on_branch = True
        invocation.advance(MutationState.BRANCHED)

        with LogContext(branch=branch, base_version=base):
            logger.info("mutation_started", message=message)
            try:
                result = unit_of_work(session)
                invocation.advance(MutationState.MUTATION_APPLIED)

                session.commit(message)
                invocation.advance(MutationState.COMMITTED_ON_BRANCH)

                self.lifecycle.checkout_trunk(session)
                invocation.on_branch = False

                outcome = self.coordinator.merge_to_trunk(session, branch, lock_timeout_ms)
                invocation.advance(MutationState.MERGE_ATTEMPTED)
            except VdsError as exc:
                exc.with_context(branch=branch, base_version=base)
                raise

            if not outcome.is_clean:
                invocation.advance(MutationState.ABORTED)
                raise ConflictError(
                    f"mutation conflicts with changes already on {self.lifecycle.trunk}",
                    details={"conflicts": outcome.conflicts},
                ).with_context(branch=branch, base_version=base)

            invocation.advance(MutationState.MERGED)
            logger.info("mutation_committed", version=outcome.head)
            return MutationResult(
                result=result,
                version=outcome.head,
                base_version=base,
                branch=branch,
            )

    def _finalize(self, invocation: _Invocation) -> None:
        """Tear down the branch, then hand the session back exactly once."""
        session = invocation.session
        branch = invocation.branch

        if branch is not None:
            if invocation.on_branch:
                try:
                    self.lifecycle.checkout_trunk(session)
                    invocation.on_branch = False
                except Exception as exc:  # noqa: BLE001
                    invocation.cleanup_errors.append(f"checkout trunk: {exc}")

            try:
                self.lifecycle.delete_branch(session, branch)
            except Exception as exc:  # noqa: BLE001
                invocation.cleanup_errors.append(f"delete branch: {exc}")

        if invocation.cleanup_errors:
            logger.error(
                "mutation_cleanup_failed",
                branch=branch,
                state=invocation.state.value,
                errors=invocation.cleanup_errors,
            )

        discard = invocation.on_branch or session.tainted
        self.sessions.release(session, discard=discard)
