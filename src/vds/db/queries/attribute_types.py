"""Attribute type queries."""

from __future__ import annotations

from typing import Any

from sqlalchemy.engine import Connection

from vds.core.errors import InUseError, NotFoundError
from vds.db.asof import as_of_params, as_of_table
from vds.db.queries._base import execute, fetch_all, fetch_one, fetch_required

ENTITY = "attribute_type"


def create_attribute_type(conn: Connection, type_id: str, name: str) -> dict[str, Any]:
    execute(
        conn,
        "INSERT INTO attribute_types (id, name) VALUES (:id, :name)",
        {"id": type_id, "name": name},
        what=f"{ENTITY} {name!r}",
    )
    return get_attribute_type(conn, type_id)


def get_attribute_type(conn: Connection, type_id: str) -> dict[str, Any]:
    return fetch_required(
        conn,
        "SELECT id, name, created_at FROM attribute_types WHERE id = :id",
        {"id": type_id},
        entity=ENTITY,
        entity_id=type_id,
    )


def list_attribute_types(conn: Connection, as_of: str | None = None) -> list[dict[str, Any]]:
    return fetch_all(
        conn,
        f"SELECT id, name, created_at FROM {as_of_table('attribute_types', as_of)} ORDER BY name",
        as_of_params(as_of),
    )


def delete_attribute_type(conn: Connection, type_id: str) -> dict[str, Any]:
    """Delete an unused type and return the removed row.

    Raises:
        InUseError: attributes still reference the type.
    """
    row = get_attribute_type(conn, type_id)
    usage = fetch_one(
        conn,
        "SELECT COUNT(*) AS n FROM attributes WHERE type_id = :id",
        {"id": type_id},
    )
    if usage and int(usage["n"]) > 0:
        raise InUseError(ENTITY, type_id)
    result = execute(conn, "DELETE FROM attribute_types WHERE id = :id", {"id": type_id}, what=ENTITY)
    if result.rowcount == 0:
        raise NotFoundError(ENTITY, type_id)
    return row
