"""Attribute operations addressed by attribute id."""

from __future__ import annotations

from typing import Any

from sqlalchemy.engine import Connection

from vds.db.queries import attributes as attributes_q
from vds.ops.context import OperationContext
from vds.ops.result import Versioned


def get_attribute(ctx: OperationContext, attribute_id: str, as_of: str | None = None) -> Versioned:
    return ctx.query(lambda conn, rev: attributes_q.get_attribute(conn, attribute_id, rev), as_of)


def update_attribute(
    ctx: OperationContext, attribute_id: str, value: str, base_version: str | None = None
) -> Versioned:
    return ctx.mutate(
        f"Update attribute {attribute_id}",
        lambda conn: attributes_q.update_attribute(conn, attribute_id, value),
        base_version,
    )


def delete_attribute(
    ctx: OperationContext, attribute_id: str, base_version: str | None = None
) -> Versioned:
    def apply(conn: Connection) -> dict[str, Any]:
        attributes_q.delete_attribute(conn, attribute_id)
        return {"deleted": attribute_id}

    return ctx.mutate(f"Remove attribute {attribute_id}", apply, base_version)
