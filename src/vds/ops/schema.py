"""Schema blob operations."""

from __future__ import annotations

from vds.core.errors import ValidationError
from vds.db.queries import schema_blob as schema_q
from vds.ops.context import OperationContext
from vds.ops.result import Versioned


def get_schema(ctx: OperationContext, as_of: str | None = None) -> Versioned:
    """The schema blob, or ``None`` data when none has been set."""
    return ctx.query(lambda conn, rev: schema_q.get_schema_blob(conn, rev), as_of)


def set_schema(ctx: OperationContext, body: str | None, base_version: str | None = None) -> Versioned:
    if body is None:
        raise ValidationError("body is required")
    return ctx.mutate(
        "Set schema blob",
        lambda conn: schema_q.set_schema_blob(conn, body),
        base_version,
    )
