"""Item queries."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy.engine import Connection

from vds.core.errors import NotFoundError
from vds.db.asof import as_of_params, as_of_table
from vds.db.queries._base import execute, fetch_all, fetch_required, page_clause

ENTITY = "item"


def create_item(conn: Connection, item_id: str, body: str) -> dict[str, Any]:
    execute(
        conn,
        "INSERT INTO items (id, body) VALUES (:id, :body)",
        {"id": item_id, "body": body},
        what=ENTITY,
    )
    return get_item(conn, item_id)


def get_item(conn: Connection, item_id: str, as_of: str | None = None) -> dict[str, Any]:
    return fetch_required(
        conn,
        f"SELECT id, body, created_at FROM {as_of_table('items', as_of)} WHERE id = :id",
        {"id": item_id, **as_of_params(as_of)},
        entity=ENTITY,
        entity_id=item_id,
    )


def list_items(
    conn: Connection,
    *,
    limit: int | None = None,
    offset: int | None = None,
    attr_filters: Sequence[tuple[str, str]] = (),
    as_of: str | None = None,
) -> list[dict[str, Any]]:
    """Items newest first.

    ``attr_filters`` holds ``(attribute type name, value)`` pairs; an
    item matches only when it carries every one of them.
    """
    params: dict[str, Any] = as_of_params(as_of)
    joins = []
    for n, (type_name, value) in enumerate(attr_filters):
        attrs = as_of_table("attributes", as_of, alias=f"a{n}")
        types = as_of_table("attribute_types", as_of, alias=f"t{n}")
        joins.append(
            f" JOIN {attrs} ON a{n}.item_id = i.id AND a{n}.value = :value{n}"
            f" JOIN {types} ON t{n}.id = a{n}.type_id AND t{n}.name = :name{n}"
        )
        params[f"name{n}"] = type_name
        params[f"value{n}"] = value

    sql = (
        f"SELECT i.id, i.body, i.created_at FROM {as_of_table('items', as_of, alias='i')}"
        + "".join(joins)
        + " ORDER BY i.created_at DESC, i.id"
    )
    sql += page_clause(limit, offset, params)
    return fetch_all(conn, sql, params)


def update_item(conn: Connection, item_id: str, body: str) -> dict[str, Any]:
    result = execute(
        conn,
        "UPDATE items SET body = :body WHERE id = :id",
        {"id": item_id, "body": body},
        what=ENTITY,
    )
    if result.rowcount == 0:
        # MySQL reports 0 for an unchanged row, so confirm existence
        get_item(conn, item_id)
    return get_item(conn, item_id)


def delete_item(conn: Connection, item_id: str) -> None:
    result = execute(conn, "DELETE FROM items WHERE id = :id", {"id": item_id}, what=ENTITY)
    if result.rowcount == 0:
        raise NotFoundError(ENTITY, item_id)
