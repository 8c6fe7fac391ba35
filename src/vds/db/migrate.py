"""Schema creation and trunk bootstrap.

Tables are created with ``CREATE TABLE IF NOT EXISTS`` semantics.  In
Dolt, DDL lands in the working set like any other change, so after
migrating the trunk the new schema is committed; mutation branches must
fork from a head that already contains the tables.
"""

from __future__ import annotations

from sqlalchemy.engine import Connection

from vds.core.logging import get_logger
from vds.db.tables import VdsBase
from vds.store.protocols import VersionedSession

logger = get_logger(__name__)


def migrate(conn: Connection) -> None:
    """Create all missing tables on the connection's checked-out branch."""
    VdsBase.metadata.create_all(conn, checkfirst=True)


def bootstrap_trunk(
    session: VersionedSession,
    trunk: str,
    message: str = "Initialize schema",
) -> str | None:
    """Migrate trunk and commit pending schema changes.

    Returns:
        The new commit hash, or None when the schema was already committed.
    """
    session.checkout(trunk)
    migrate(session.conn)
    if not session.has_pending_changes():
        logger.info("schema_up_to_date", branch=trunk)
        return None
    version = session.commit(message)
    logger.info("schema_committed", branch=trunk, version=version)
    return version
