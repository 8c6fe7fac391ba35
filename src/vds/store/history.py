"""Commit history from ``dolt_log`` and ``dolt_diff_items``."""

from __future__ import annotations

from typing import Any

from sqlalchemy.engine import Connection

from vds.db.queries._base import fetch_all, fetch_required, page_clause

_COMMIT_COLUMNS = "commit_hash AS hash, committer, message, date"


def list_commits(conn: Connection, *, limit: int = 50, offset: int = 0) -> list[dict[str, Any]]:
    """Commits on the checked-out line, newest first."""
    params: dict[str, Any] = {}
    sql = f"SELECT {_COMMIT_COLUMNS} FROM dolt_log ORDER BY date DESC"
    sql += page_clause(limit, offset, params)
    return fetch_all(conn, sql, params)


def get_commit(conn: Connection, commit_hash: str) -> dict[str, Any]:
    return fetch_required(
        conn,
        f"SELECT {_COMMIT_COLUMNS} FROM dolt_log WHERE commit_hash = :hash",
        {"hash": commit_hash},
        entity="commit",
        entity_id=commit_hash,
    )


def item_history(
    conn: Connection, item_id: str, *, limit: int = 50, offset: int = 0
) -> list[dict[str, Any]]:
    """Commits that inserted, changed or deleted ``item_id``."""
    params: dict[str, Any] = {"item_id": item_id}
    sql = (
        "SELECT DISTINCT l.commit_hash AS hash, l.committer, l.message, l.date"
        " FROM dolt_log AS l"
        " JOIN dolt_diff_items AS d ON d.to_commit = l.commit_hash"
        " WHERE d.from_id = :item_id OR d.to_id = :item_id"
        " ORDER BY l.date DESC"
    )
    sql += page_clause(limit, offset, params)
    return fetch_all(conn, sql, params)
