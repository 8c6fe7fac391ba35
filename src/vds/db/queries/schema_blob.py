"""The schema blob: one free-form document describing how clients should
interpret attribute and linkage types."""

from __future__ import annotations

from typing import Any

from sqlalchemy.engine import Connection

from vds.db.asof import as_of_params, as_of_table
from vds.db.queries._base import execute, fetch_one

SCHEMA_BLOB_ID = "default"


def get_schema_blob(conn: Connection, as_of: str | None = None) -> dict[str, Any] | None:
    return fetch_one(
        conn,
        f"SELECT id, body, created_at FROM {as_of_table('schema_blob', as_of)} WHERE id = :id",
        {"id": SCHEMA_BLOB_ID, **as_of_params(as_of)},
    )


def set_schema_blob(conn: Connection, body: str) -> dict[str, Any] | None:
    if get_schema_blob(conn) is None:
        execute(
            conn,
            "INSERT INTO schema_blob (id, body) VALUES (:id, :body)",
            {"id": SCHEMA_BLOB_ID, "body": body},
            what="schema blob",
        )
    else:
        execute(
            conn,
            "UPDATE schema_blob SET body = :body WHERE id = :id",
            {"id": SCHEMA_BLOB_ID, "body": body},
            what="schema blob",
        )
    return get_schema_blob(conn)
