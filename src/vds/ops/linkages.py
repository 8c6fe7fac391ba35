"""Linkage operations, single and batched."""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy.engine import Connection

from vds.core.errors import ValidationError
from vds.db.queries import linkages as linkages_q
from vds.ops.context import OperationContext
from vds.ops.result import Versioned


@dataclass(frozen=True, slots=True)
class NewLinkage:
    source_id: str
    target_id: str
    type_id: str


def list_linkages(
    ctx: OperationContext,
    *,
    type_id: str | None = None,
    source_id: str | None = None,
    target_id: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
    as_of: str | None = None,
) -> Versioned:
    return ctx.query(
        lambda conn, rev: linkages_q.list_linkages(
            conn,
            type_id=type_id,
            source_id=source_id,
            target_id=target_id,
            limit=limit,
            offset=offset,
            as_of=rev,
        ),
        as_of,
    )


def create_linkage(
    ctx: OperationContext, linkage: NewLinkage, base_version: str | None = None
) -> Versioned:
    linkage_id = str(uuid.uuid4())
    return ctx.mutate(
        f"Link {linkage.source_id} -> {linkage.target_id}",
        lambda conn: linkages_q.create_linkage(
            conn, linkage_id, linkage.source_id, linkage.target_id, linkage.type_id
        ),
        base_version,
    )


def create_linkages(
    ctx: OperationContext, linkages: Sequence[NewLinkage], base_version: str | None = None
) -> Versioned:
    """Create every linkage in one commit, or none of them."""
    if not linkages:
        raise ValidationError("No linkages provided")

    def apply(conn: Connection) -> list[dict[str, Any]]:
        return [
            linkages_q.create_linkage(
                conn, str(uuid.uuid4()), new.source_id, new.target_id, new.type_id
            )
            for new in linkages
        ]

    return ctx.mutate("Create linkages", apply, base_version)


def delete_linkage(
    ctx: OperationContext, linkage_id: str, base_version: str | None = None
) -> Versioned:
    def apply(conn: Connection) -> dict[str, Any]:
        linkages_q.delete_linkage(conn, linkage_id)
        return {"deleted": linkage_id}

    return ctx.mutate(f"Remove linkage {linkage_id}", apply, base_version)


def remove_linkages(
    ctx: OperationContext, linkage_ids: Sequence[str], base_version: str | None = None
) -> Versioned:
    if not linkage_ids:
        raise ValidationError("No linkages provided")

    def apply(conn: Connection) -> dict[str, Any]:
        for linkage_id in linkage_ids:
            linkages_q.delete_linkage(conn, linkage_id)
        return {"deleted": list(linkage_ids)}

    return ctx.mutate("Remove linkages", apply, base_version)
