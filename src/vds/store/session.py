"""
Dedicated Dolt session.

``DoltSession`` wraps one SQLAlchemy ``Connection`` (one physical MySQL
connection, autocommit) and exposes the version-control procedures the
branching layer needs: branch, checkout, commit, merge, abort, named
locks.  Driver errors are translated into :mod:`vds.core.errors` types at
this boundary so nothing above it sees ``sqlalchemy.exc``.

Procedures used::

    SELECT DOLT_HASHOF('HEAD')
    SELECT ACTIVE_BRANCH()
    SELECT DOLT_HASHOF(:ref)                SELECT commit_hash FROM dolt_log ...
    CALL DOLT_BRANCH(:name, :base)          CALL DOLT_BRANCH('-D', :name)
    CALL DOLT_CHECKOUT(:name)
    CALL DOLT_ADD('-A')                     CALL DOLT_COMMIT('--allow-empty', '-m', :msg)
    SET @@dolt_allow_commit_conflicts = 1   CALL DOLT_MERGE(:branch)
    CALL DOLT_MERGE('--abort')
    SELECT GET_LOCK(:name, :timeout)        SELECT RELEASE_LOCK(:name)
    SELECT name FROM dolt_branches WHERE name LIKE :prefix

Tags:
    store, dolt, session, branch, merge, advisory-lock

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import exc as sa_exc
from sqlalchemy import text
from sqlalchemy.engine import Connection

from vds.core.errors import (
    BranchExistsError,
    StoreError,
    StoreUnavailableError,
    UnknownVersionError,
)
from vds.core.logging import get_logger
from vds.db.asof import is_timestamp
from vds.store.protocols import MergeResult

logger = get_logger(__name__)

# mysql client error numbers that mean the connection itself is gone
_CONNECTION_ERRNOS = frozenset({2003, 2005, 2006, 2013, 2055})


def _driver_message(exc: sa_exc.SQLAlchemyError) -> str:
    return str(getattr(exc, "orig", None) or exc).strip()


def _lowered(exc: sa_exc.SQLAlchemyError) -> str:
    return _driver_message(exc).lower()


def is_connectivity_error(exc: BaseException) -> bool:
    """True when a DBAPI error means the physical connection is unusable."""
    if isinstance(exc, sa_exc.DBAPIError):
        if exc.connection_invalidated:
            return True
        errno = getattr(exc.orig, "errno", None)
        if errno in _CONNECTION_ERRNOS:
            return True
        return isinstance(exc, sa_exc.InterfaceError)
    return isinstance(exc, ConnectionError)


def translate_store_error(exc: sa_exc.SQLAlchemyError, action: str) -> StoreError:
    """Map a SQLAlchemy/driver exception to a store error."""
    if is_connectivity_error(exc):
        return StoreUnavailableError(f"store unavailable during {action}", cause=exc)
    return StoreError(f"{action} failed: {_driver_message(exc)}", cause=exc)


class DoltSession:
    """A dedicated connection to the Dolt server.

    Owned by exactly one logical operation between
    :meth:`SessionPool.acquire` and :meth:`SessionPool.release`.
    ``tainted`` is set when the connection may still be parked on a
    branch other than trunk; the pool discards tainted connections
    instead of reusing them.
    """

    def __init__(self, conn: Connection, *, trunk: str = "main"):
        self._conn = conn
        self.trunk = trunk
        self.tainted = False

    @property
    def conn(self) -> Connection:
        return self._conn

    # ── Low-level helpers ────────────────────────────────────────────────

    def _execute(self, sql: str, action: str, **params: Any):
        try:
            return self._conn.execute(text(sql), params)
        except sa_exc.SQLAlchemyError as exc:
            raise translate_store_error(exc, action) from exc

    def _scalar(self, sql: str, action: str, **params: Any) -> Any:
        return self._execute(sql, action, **params).scalar()

    # ── Heads and branches ───────────────────────────────────────────────

    def head(self) -> str:
        """Commit hash at the tip of the checked-out line."""
        value = self._scalar("SELECT DOLT_HASHOF('HEAD')", "head lookup")
        if not value:
            raise StoreError("head lookup returned no commit")
        return str(value)

    def active_branch(self) -> str:
        return str(self._scalar("SELECT ACTIVE_BRANCH()", "active branch lookup"))

    def resolve(self, ref: str) -> str:
        """Commit hash for ``ref``: a commit, a branch, or a date on trunk.

        Raises:
            UnknownVersionError: ``ref`` names no commit.
        """
        if is_timestamp(ref):
            sql = (
                "SELECT commit_hash FROM dolt_log"
                " WHERE date <= TIMESTAMP(:ref) ORDER BY date DESC LIMIT 1"
            )
        else:
            sql = "SELECT DOLT_HASHOF(:ref)"
        try:
            value = self._conn.execute(text(sql), {"ref": ref}).scalar()
        except sa_exc.SQLAlchemyError as exc:
            if is_connectivity_error(exc):
                raise translate_store_error(exc, "revision lookup") from exc
            raise UnknownVersionError(ref, cause=exc) from exc
        if not value:
            raise UnknownVersionError(ref)
        return str(value)

    def create_branch(self, name: str, base: str) -> None:
        """Create ``name`` pointing at ``base`` (a commit hash or branch).

        Raises:
            BranchExistsError: ``name`` is already taken.
            UnknownVersionError: ``base`` does not resolve to a commit.
        """
        try:
            self._conn.execute(
                text("CALL DOLT_BRANCH(:name, :base)"), {"name": name, "base": base}
            )
        except sa_exc.SQLAlchemyError as exc:
            if is_connectivity_error(exc):
                raise translate_store_error(exc, "branch create") from exc
            message = _lowered(exc)
            if "already exists" in message:
                raise BranchExistsError(name, cause=exc) from exc
            if any(marker in message for marker in ("not found", "invalid", "unknown", "could not resolve")):
                raise UnknownVersionError(base, cause=exc) from exc
            raise translate_store_error(exc, "branch create") from exc

    def checkout(self, name: str) -> None:
        self._execute("CALL DOLT_CHECKOUT(:name)", "checkout", name=name)

    def delete_branch(self, name: str) -> bool:
        """Force-delete ``name``.  Returns False when it did not exist."""
        try:
            self._conn.execute(text("CALL DOLT_BRANCH('-D', :name)"), {"name": name})
        except sa_exc.SQLAlchemyError as exc:
            if is_connectivity_error(exc):
                raise translate_store_error(exc, "branch delete") from exc
            message = _lowered(exc)
            if "not found" in message or "does not exist" in message:
                logger.debug("branch_already_absent", branch=name)
                return False
            raise translate_store_error(exc, "branch delete") from exc
        return True

    def list_branches(self, prefix: str) -> list[str]:
        result = self._execute(
            "SELECT name FROM dolt_branches WHERE name LIKE :pattern ORDER BY name",
            "branch list",
            pattern=f"{prefix}%",
        )
        return [str(row[0]) for row in result]

    def has_pending_changes(self) -> bool:
        """True when the working set differs from HEAD (e.g. after DDL)."""
        count = self._scalar("SELECT COUNT(*) FROM dolt_status", "status lookup")
        return bool(count)

    # ── Commit and merge ─────────────────────────────────────────────────

    def commit(self, message: str) -> str:
        """Stage everything and commit on the checked-out branch."""
        self._execute("CALL DOLT_ADD('-A')", "stage")
        row = self._execute(
            "CALL DOLT_COMMIT('--allow-empty', '-m', :message)",
            "commit",
            message=message,
        ).first()
        if row is None or not row[0]:
            return self.head()
        return str(row[0])

    def merge(self, branch: str) -> MergeResult:
        """Merge ``branch`` into the checked-out line.

        Conflicts are reported as a count rather than an error so the
        caller decides whether to abort.
        """
        self._execute("SET @@dolt_allow_commit_conflicts = 1", "merge setup")
        row = self._execute("CALL DOLT_MERGE(:branch)", "merge", branch=branch).first()
        if row is None:
            raise StoreError(f"merge of {branch} returned no result")
        return MergeResult(
            hash=str(row[0] or ""),
            fast_forward=bool(row[1]),
            conflicts=int(row[2] or 0),
        )

    def abort_merge(self) -> None:
        self._execute("CALL DOLT_MERGE('--abort')", "merge abort")

    # ── Named locks ──────────────────────────────────────────────────────

    def acquire_lock(self, name: str, timeout_s: float) -> bool:
        """``GET_LOCK``; False when the wait expired."""
        got = self._scalar(
            "SELECT GET_LOCK(:name, :timeout)", "lock acquire", name=name, timeout=timeout_s
        )
        return got == 1

    def release_lock(self, name: str) -> None:
        self._scalar("SELECT RELEASE_LOCK(:name)", "lock release", name=name)

    def __repr__(self) -> str:
        return f"DoltSession(trunk={self.trunk!r}, tainted={self.tainted})"
