"""
Branch-per-mutation concurrency protocol.

Components, leaves first:
    BranchLifecycleManager       create / check out / delete mutation branches
    MergeCoordinator             serialised merge into trunk under a merge lock
    BranchedMutationOrchestrator public write entry point
    sweep_orphans                startup removal of branches left by crashes
"""

from vds.branching.lifecycle import BranchLifecycleManager
from vds.branching.locks import AdvisoryMergeLock, MergeLock, ProcessMergeLock
from vds.branching.merge import MergeCoordinator, MergeOutcome, MergeStatus
from vds.branching.orchestrator import (
    BranchedMutationOrchestrator,
    MutationResult,
    MutationState,
    UnitOfWork,
)
from vds.branching.sweeper import sweep_at_startup, sweep_orphans

__all__ = [
    "AdvisoryMergeLock",
    "BranchLifecycleManager",
    "BranchedMutationOrchestrator",
    "MergeCoordinator",
    "MergeLock",
    "MergeOutcome",
    "MergeStatus",
    "MutationResult",
    "MutationState",
    "ProcessMergeLock",
    "UnitOfWork",
    "sweep_at_startup",
    "sweep_orphans",
]
