"""Attribute queries.  An item carries at most one attribute per type."""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy import bindparam, text
from sqlalchemy.engine import Connection

from vds.core.errors import NotFoundError
from vds.db.asof import as_of_params, as_of_table
from vds.db.queries._base import execute, fetch_all, fetch_one, fetch_required

ENTITY = "attribute"

_COLUMNS = "id, item_id, type_id, value, created_at"


def add_attribute(
    conn: Connection, attribute_id: str, item_id: str, type_id: str, value: str
) -> dict[str, Any]:
    execute(
        conn,
        "INSERT INTO attributes (id, item_id, type_id, value)"
        " VALUES (:id, :item_id, :type_id, :value)",
        {"id": attribute_id, "item_id": item_id, "type_id": type_id, "value": value},
        what=ENTITY,
    )
    return get_attribute(conn, attribute_id)


def get_attribute(conn: Connection, attribute_id: str, as_of: str | None = None) -> dict[str, Any]:
    return fetch_required(
        conn,
        f"SELECT {_COLUMNS} FROM {as_of_table('attributes', as_of)} WHERE id = :id",
        {"id": attribute_id, **as_of_params(as_of)},
        entity=ENTITY,
        entity_id=attribute_id,
    )


def list_attributes(conn: Connection, item_id: str, as_of: str | None = None) -> list[dict[str, Any]]:
    return fetch_all(
        conn,
        f"SELECT {_COLUMNS} FROM {as_of_table('attributes', as_of)}"
        " WHERE item_id = :item_id ORDER BY created_at, id",
        {"item_id": item_id, **as_of_params(as_of)},
    )


def update_attribute(conn: Connection, attribute_id: str, value: str) -> dict[str, Any]:
    get_attribute(conn, attribute_id)
    execute(
        conn,
        "UPDATE attributes SET value = :value WHERE id = :id",
        {"id": attribute_id, "value": value},
        what=ENTITY,
    )
    return get_attribute(conn, attribute_id)


def delete_attribute(conn: Connection, attribute_id: str) -> None:
    result = execute(conn, "DELETE FROM attributes WHERE id = :id", {"id": attribute_id}, what=ENTITY)
    if result.rowcount == 0:
        raise NotFoundError(ENTITY, attribute_id)


def upsert_attribute(conn: Connection, item_id: str, type_id: str, value: str) -> dict[str, Any]:
    """Set the item's attribute of ``type_id``, creating it when absent."""
    existing = fetch_one(
        conn,
        f"SELECT {_COLUMNS} FROM attributes WHERE item_id = :item_id AND type_id = :type_id",
        {"item_id": item_id, "type_id": type_id},
    )
    if existing is None:
        return add_attribute(conn, str(uuid.uuid4()), item_id, type_id, value)
    return update_attribute(conn, existing["id"], value)


def delete_attributes_by_type_ids(conn: Connection, item_id: str, type_ids: Sequence[str]) -> int:
    """Remove the item's attributes of the given types; returns rows removed."""
    if not type_ids:
        return 0
    stmt = text(
        "DELETE FROM attributes WHERE item_id = :item_id AND type_id IN :type_ids"
    ).bindparams(bindparam("type_ids", expanding=True))
    result = execute(conn, stmt, {"item_id": item_id, "type_ids": list(type_ids)}, what=ENTITY)
    return result.rowcount
