"""Merge lock implementations.

Only one merge into trunk may run at a time.  The lock is held across
merge, head read and abort, never across a caller's unit of work.

``AdvisoryMergeLock`` uses the store's named lock (``GET_LOCK``) on the
merging session, which serialises merges across every process talking to
the same store.  ``ProcessMergeLock`` is a process-wide mutex and is only
correct when a single process performs all merges.
"""

from __future__ import annotations

import threading
from typing import Protocol

from vds.store.protocols import VersionedSession


class MergeLock(Protocol):
    """Mutual exclusion around the merge window.

    Implementations are shared by every mutation in the process.  The
    session is the one that will run the merge; locks that live in the
    store are taken on it, so they follow that connection.

    Attributes:
        name: Lock name, used in logs and error context
    """

    name: str

    def acquire(self, session: VersionedSession, timeout_s: float) -> bool:
        """Take the lock, waiting at most ``timeout_s`` seconds.

        Args:
            session: Session that will perform the merge
            timeout_s: Upper bound on the wait; ``0`` tries once

        Returns:
            True when the lock is held, False when the wait expired.

        Raises:
            StoreError: the store could not be asked for the lock.
        """
        ...

    def release(self, session: VersionedSession) -> None:
        """Give the lock back.  Called once per successful ``acquire``.

        Args:
            session: The session passed to :meth:`acquire`

        Raises:
            StoreError: the release statement failed; the caller must not
                reuse ``session``.
        """
        ...


class AdvisoryMergeLock:
    """Store-wide named lock held by the merging session.

    ``GET_LOCK`` locks belong to the connection, so the merge must run on
    the same session that acquired the lock, and a dropped connection
    frees it.  Safe for any number of processes sharing one store.

    Args:
        name: Named lock shared by every vds process on the store

    Example:
        >>> lock = AdvisoryMergeLock("vds_merge")
        >>> if lock.acquire(session, 10.0):
        ...     try:
        ...         session.merge(branch)
        ...     finally:
        ...         lock.release(session)
    """

    def __init__(self, name: str = "vds_merge"):
        self.name = name

    def acquire(self, session: VersionedSession, timeout_s: float) -> bool:
        """``GET_LOCK`` on ``session``; False when the store timed out."""
        return session.acquire_lock(self.name, timeout_s)

    def release(self, session: VersionedSession) -> None:
        """``RELEASE_LOCK`` on ``session``."""
        session.release_lock(self.name)

    def __repr__(self) -> str:
        return f"AdvisoryMergeLock({self.name!r})"


class ProcessMergeLock:
    """In-process mutex with a bounded wait.

    The session is ignored.  Merges from other processes are not
    excluded, so use this only when one process owns every merge (single
    worker deployments and tests).

    Args:
        name: Label for logs and error context
    """

    def __init__(self, name: str = "process"):
        self.name = name
        self._lock = threading.Lock()

    def acquire(self, session: VersionedSession, timeout_s: float) -> bool:
        """Wait on the mutex; negative timeouts are treated as ``0``."""
        return self._lock.acquire(timeout=max(timeout_s, 0))

    def release(self, session: VersionedSession) -> None:
        """Release the mutex.

        Raises:
            RuntimeError: the mutex is not held.
        """
        self._lock.release()

    def __repr__(self) -> str:
        return f"ProcessMergeLock({self.name!r})"
