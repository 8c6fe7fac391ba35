"""Attribute type operations."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy.engine import Connection

from vds.core.errors import ValidationError
from vds.db.queries import attribute_types as types_q
from vds.ops.context import OperationContext
from vds.ops.result import Versioned


def list_attribute_types(ctx: OperationContext, as_of: str | None = None) -> Versioned:
    return ctx.query(lambda conn, rev: types_q.list_attribute_types(conn, rev), as_of)


def create_attribute_type(
    ctx: OperationContext, name: str, base_version: str | None = None
) -> Versioned:
    name = name.strip()
    if not name:
        raise ValidationError("attribute type name is required")
    type_id = str(uuid.uuid4())
    return ctx.mutate(
        f"Create attribute type '{name}'",
        lambda conn: types_q.create_attribute_type(conn, type_id, name),
        base_version,
    )


def delete_attribute_type(
    ctx: OperationContext, type_id: str, base_version: str | None = None
) -> Versioned:
    def apply(conn: Connection) -> dict[str, Any]:
        types_q.delete_attribute_type(conn, type_id)
        return {"deleted": type_id}

    return ctx.mutate(f"Delete attribute type {type_id}", apply, base_version)
