"""
Versioned store client.

Pooled dedicated sessions over a Dolt (MySQL protocol) server.  A session
is a single physical connection, because checked-out branch state is
scoped to the connection: it is acquired, owned by exactly one logical
operation, and released exactly once.
"""

from vds.store.engine import SessionPool, create_store_engine
from vds.store.protocols import MergeResult, VersionedSession
from vds.store.session import DoltSession

__all__ = [
    "DoltSession",
    "MergeResult",
    "SessionPool",
    "VersionedSession",
    "create_store_engine",
]
