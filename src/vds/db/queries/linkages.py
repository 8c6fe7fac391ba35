"""Linkage queries.  A linkage is a typed, directed edge between two items."""

from __future__ import annotations

from typing import Any, Literal

from sqlalchemy.engine import Connection

from vds.core.errors import NotFoundError, ValidationError
from vds.db.asof import as_of_params, as_of_table
from vds.db.queries._base import execute, fetch_all, fetch_required, page_clause

ENTITY = "linkage"

Direction = Literal["source", "target", "both"]

_COLUMNS = "id, source_id, target_id, type_id, created_at"


def create_linkage(
    conn: Connection, linkage_id: str, source_id: str, target_id: str, type_id: str
) -> dict[str, Any]:
    execute(
        conn,
        "INSERT INTO linkages (id, source_id, target_id, type_id)"
        " VALUES (:id, :source_id, :target_id, :type_id)",
        {"id": linkage_id, "source_id": source_id, "target_id": target_id, "type_id": type_id},
        what=ENTITY,
    )
    return get_linkage(conn, linkage_id)


def get_linkage(conn: Connection, linkage_id: str) -> dict[str, Any]:
    return fetch_required(
        conn,
        f"SELECT {_COLUMNS} FROM linkages WHERE id = :id",
        {"id": linkage_id},
        entity=ENTITY,
        entity_id=linkage_id,
    )


def list_linkages_for_item(
    conn: Connection,
    item_id: str,
    direction: Direction = "both",
    as_of: str | None = None,
) -> list[dict[str, Any]]:
    if direction == "source":
        where = "source_id = :item_id"
    elif direction == "target":
        where = "target_id = :item_id"
    elif direction == "both":
        where = "(source_id = :item_id OR target_id = :item_id)"
    else:
        raise ValidationError(f"invalid linkage direction: {direction}")
    return fetch_all(
        conn,
        f"SELECT {_COLUMNS} FROM {as_of_table('linkages', as_of)}"
        f" WHERE {where} ORDER BY created_at, id",
        {"item_id": item_id, **as_of_params(as_of)},
    )


def list_linkages(
    conn: Connection,
    *,
    type_id: str | None = None,
    source_id: str | None = None,
    target_id: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
    as_of: str | None = None,
) -> list[dict[str, Any]]:
    params: dict[str, Any] = as_of_params(as_of)
    conditions = []
    for column, value in (("type_id", type_id), ("source_id", source_id), ("target_id", target_id)):
        if value:
            conditions.append(f"{column} = :{column}")
            params[column] = value
    sql = f"SELECT {_COLUMNS} FROM {as_of_table('linkages', as_of)}"
    if conditions:
        sql += " WHERE " + " AND ".join(conditions)
    sql += " ORDER BY created_at, id"
    sql += page_clause(limit, offset, params)
    return fetch_all(conn, sql, params)


def delete_linkage(conn: Connection, linkage_id: str) -> None:
    result = execute(conn, "DELETE FROM linkages WHERE id = :id", {"id": linkage_id}, what=ENTITY)
    if result.rowcount == 0:
        raise NotFoundError(ENTITY, linkage_id)
