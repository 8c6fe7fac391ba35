"""Store-facing protocols consumed by the branching layer.

The branching package depends only on these shapes, so it can be driven
by :class:`~vds.store.session.DoltSession` in production and by an
in-memory store in tests.

Tags: store, protocol, typing
Doc-Types: TECHNICAL_DESIGN
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class MergeResult:
    """Raw result of a merge call.

    Attributes:
        hash: Resulting commit on the checked-out line ("" when conflicted)
        fast_forward: Whether the merge was a fast-forward
        conflicts: Number of conflicting (row, column) cells
    """

    hash: str
    fast_forward: bool
    conflicts: int


@runtime_checkable
class VersionedSession(Protocol):
    """One dedicated connection to the versioned store."""

    #: set when the connection may hold branch or lock state and must not be reused
    tainted: bool

    @property
    def conn(self) -> Any:
        """Connection handed to CRUD queries (branch-scoped)."""
        ...

    def head(self) -> str: ...

    def resolve(self, ref: str) -> str: ...

    def active_branch(self) -> str: ...

    def create_branch(self, name: str, base: str) -> None: ...

    def checkout(self, name: str) -> None: ...

    def commit(self, message: str) -> str: ...

    def merge(self, branch: str) -> MergeResult: ...

    def abort_merge(self) -> None: ...

    def delete_branch(self, name: str) -> bool: ...

    def acquire_lock(self, name: str, timeout_s: float) -> bool: ...

    def release_lock(self, name: str) -> None: ...

    def list_branches(self, prefix: str) -> list[str]: ...

    def has_pending_changes(self) -> bool: ...


class SessionSource(Protocol):
    """Anything that hands out dedicated sessions (the pool, or a test double)."""

    def acquire(self) -> VersionedSession: ...

    def release(self, session: VersionedSession, *, discard: bool = False) -> None: ...

    def session(self) -> AbstractContextManager[VersionedSession]: ...

