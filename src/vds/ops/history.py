"""History operations over the trunk commit log.

The log is read at the live trunk; the version returned is the head read
before it, so it is never newer than the log.
"""

from __future__ import annotations

from vds.ops.context import OperationContext
from vds.ops.result import Versioned
from vds.store import history as history_q


def list_history(ctx: OperationContext, *, limit: int = 50, offset: int = 0) -> Versioned:
    return ctx.query(lambda conn, _rev: history_q.list_commits(conn, limit=limit, offset=offset))


def get_commit(ctx: OperationContext, commit_hash: str) -> Versioned:
    return ctx.query(lambda conn, _rev: history_q.get_commit(conn, commit_hash))


def item_history(
    ctx: OperationContext, item_id: str, *, limit: int = 50, offset: int = 0
) -> Versioned:
    return ctx.query(
        lambda conn, _rev: history_q.item_history(conn, item_id, limit=limit, offset=offset)
    )
