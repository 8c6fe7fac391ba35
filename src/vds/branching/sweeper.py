"""Orphan branch sweeper.

A process that dies between creating a mutation branch and deleting it
leaves the branch behind.  At startup, before any request is accepted, no
mutation can be in flight, so every branch matching the naming convention
is an orphan and is deleted.  The sweep is best-effort: a branch that
cannot be deleted is logged and skipped.
"""

from __future__ import annotations

from vds.branching.lifecycle import BranchLifecycleManager
from vds.core.errors import VdsError
from vds.core.logging import get_logger
from vds.store.protocols import SessionSource, VersionedSession

logger = get_logger(__name__)


def sweep_orphans(session: VersionedSession, lifecycle: BranchLifecycleManager) -> int:
    """Delete every mutation branch.  Returns the number deleted.

    Listing failures propagate; per-branch delete failures are logged.
    """
    candidates = [
        name for name in session.list_branches(lifecycle.prefix)
        if lifecycle.is_mutation_branch(name)
    ]

    deleted = 0
    failed: list[str] = []
    for name in candidates:
        try:
            if lifecycle.delete_branch(session, name):
                deleted += 1
                logger.info("orphan_branch_deleted", branch=name)
        except VdsError as exc:
            failed.append(name)
            logger.error("orphan_branch_delete_failed", branch=name, error=str(exc))

    logger.info(
        "orphan_sweep_complete",
        found=len(candidates),
        deleted=deleted,
        failed=len(failed),
    )
    return deleted


def sweep_at_startup(sessions: SessionSource, lifecycle: BranchLifecycleManager) -> int:
    """Run :func:`sweep_orphans` on a session borrowed from the pool."""
    with sessions.session() as session:
        lifecycle.checkout_trunk(session)
        return sweep_orphans(session, lifecycle)
