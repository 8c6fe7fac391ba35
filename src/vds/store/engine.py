"""SQLAlchemy engine factory and the dedicated-session pool.

Manifesto:
    Branch state in Dolt is scoped to the physical connection.  The pool
    therefore hands out whole connections wrapped as
    :class:`~vds.store.session.DoltSession`, tracks who holds each one,
    and refuses to put a connection back into circulation twice.  A
    connection that might still sit on a mutation branch is invalidated
    instead of pooled.

This module provides:
* ``create_store_engine`` -- QueuePool engine in autocommit mode.
* ``SessionPool``         -- acquire / release / ``session()`` scope.

Tags:
    store, sqlalchemy, pool, session, engine

Doc-Types:
    api-reference
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine as _sa_create_engine
from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import Engine

from vds.core.errors import ResourceUnavailableError, StoreUnavailableError
from vds.core.logging import get_logger
from vds.store.session import DoltSession, translate_store_error

logger = get_logger(__name__)


def create_store_engine(
    url: str,
    *,
    echo: bool = False,
    pool_size: int | None = None,
    max_overflow: int | None = None,
    pool_timeout: float | None = None,
    **kwargs: Any,
) -> Engine:
    """Create the engine for the versioned store.

    Parameters
    ----------
    url:
        Database URL (``mysql+mysqlconnector://…``; ``sqlite://`` in tests).
    echo:
        If ``True``, log all SQL.
    pool_size, max_overflow, pool_timeout:
        Connection pool parameters (ignored for SQLite).
    **kwargs:
        Extra arguments forwarded to ``sqlalchemy.create_engine``.
    """
    kwargs.setdefault("isolation_level", "AUTOCOMMIT")

    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        return _sa_create_engine(url, echo=echo, **kwargs)

    pool_kwargs: dict[str, Any] = {"pool_pre_ping": True}
    if pool_size is not None:
        pool_kwargs["pool_size"] = pool_size
    if max_overflow is not None:
        pool_kwargs["max_overflow"] = max_overflow
    if pool_timeout is not None:
        pool_kwargs["pool_timeout"] = pool_timeout
    return _sa_create_engine(url, echo=echo, **pool_kwargs, **kwargs)


class SessionPool:
    """Hands out dedicated sessions, one physical connection each.

    Example::

        pool = SessionPool(create_store_engine(settings.database_url))
        with pool.session() as session:
            head = session.head()
    """

    def __init__(self, engine: Engine, *, trunk: str = "main"):
        self._engine = engine
        self._trunk = trunk
        self._lock = threading.Lock()
        self._held: set[int] = set()

    @property
    def engine(self) -> Engine:
        return self._engine

    def acquire(self) -> DoltSession:
        """Check out one connection.

        Raises:
            ResourceUnavailableError: pool exhausted past its timeout.
            StoreUnavailableError: the store could not be reached.
        """
        try:
            conn = self._engine.connect()
        except sa_exc.TimeoutError as exc:
            raise ResourceUnavailableError(
                "no store session available before pool timeout", cause=exc
            ) from exc
        except sa_exc.SQLAlchemyError as exc:
            error = translate_store_error(exc, "connect")
            if not isinstance(error, StoreUnavailableError):
                error = StoreUnavailableError("could not connect to store", cause=exc)
            raise error from exc

        session = DoltSession(conn, trunk=self._trunk)
        with self._lock:
            self._held.add(id(session))
        return session

    def release(self, session: DoltSession, *, discard: bool = False) -> None:
        """Return ``session``'s connection.  Safe to call more than once.

        With ``discard`` (or a tainted session) the physical connection
        is invalidated so no later caller inherits its branch state.
        """
        with self._lock:
            if id(session) not in self._held:
                logger.warning("session_double_release", session=repr(session))
                return
            self._held.discard(id(session))

        conn = session.conn
        try:
            if discard or session.tainted:
                logger.warning("session_discarded", session=repr(session))
                conn.invalidate()
            conn.close()
        except sa_exc.SQLAlchemyError as exc:
            logger.warning("session_release_failed", error=str(exc))

    @contextmanager
    def session(self) -> Iterator[DoltSession]:
        """Acquire a session for the duration of the block."""
        session = self.acquire()
        try:
            yield session
        finally:
            self.release(session)

    def stats(self) -> dict[str, Any]:
        """Checked-out and configured counts for health output."""
        pool = self._engine.pool
        size = getattr(pool, "size", None)
        checked_out = getattr(pool, "checkedout", None)
        with self._lock:
            held = len(self._held)
        return {
            "held": held,
            "size": size() if callable(size) else None,
            "checked_out": checked_out() if callable(checked_out) else None,
        }

    def dispose(self) -> None:
        self._engine.dispose()
