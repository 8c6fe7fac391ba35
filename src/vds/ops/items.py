"""Item operations."""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.engine import Connection

from vds.core.errors import ValidationError
from vds.db.queries import attributes as attributes_q
from vds.db.queries import items as items_q
from vds.db.queries import linkages as linkages_q
from vds.ops.context import OperationContext
from vds.ops.result import Versioned


@dataclass(frozen=True, slots=True)
class AttributeSet:
    type_id: str
    value: str


@dataclass
class ItemUpdate:
    """Changes applied to one item in a single commit.

    Attributes:
        body: New body, or None to leave it unchanged
        set_attributes: Attributes to create or overwrite, by type
        remove_attributes: Attribute type ids to remove from the item
    """

    body: str | None = None
    set_attributes: list[AttributeSet] = field(default_factory=list)
    remove_attributes: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.body is None and not self.set_attributes and not self.remove_attributes


def _item_detail(conn: Connection, item_id: str, as_of: str | None = None) -> dict[str, Any]:
    item = items_q.get_item(conn, item_id, as_of)
    item["attributes"] = attributes_q.list_attributes(conn, item_id, as_of)
    item["linkages"] = linkages_q.list_linkages_for_item(conn, item_id, "both", as_of)
    return item


def create_item(ctx: OperationContext, body: str, base_version: str | None = None) -> Versioned:
    item_id = str(uuid.uuid4())
    return ctx.mutate(
        f"Create item {item_id}",
        lambda conn: items_q.create_item(conn, item_id, body),
        base_version,
    )


def list_items(
    ctx: OperationContext,
    *,
    limit: int | None = None,
    offset: int | None = None,
    attr_filters: Sequence[tuple[str, str]] = (),
    as_of: str | None = None,
) -> Versioned:
    return ctx.query(
        lambda conn, rev: items_q.list_items(
            conn, limit=limit, offset=offset, attr_filters=attr_filters, as_of=rev
        ),
        as_of,
    )


def get_item(ctx: OperationContext, item_id: str, as_of: str | None = None) -> Versioned:
    """Item with its attributes and every linkage it takes part in."""
    return ctx.query(lambda conn, rev: _item_detail(conn, item_id, rev), as_of)


def update_item(
    ctx: OperationContext,
    item_id: str,
    update: ItemUpdate,
    base_version: str | None = None,
) -> Versioned:
    if update.is_empty:
        raise ValidationError("No updates provided")

    def apply(conn: Connection) -> dict[str, Any]:
        if update.body is not None:
            items_q.update_item(conn, item_id, update.body)
        else:
            items_q.get_item(conn, item_id)
        for attr in update.set_attributes:
            attributes_q.upsert_attribute(conn, item_id, attr.type_id, attr.value)
        if update.remove_attributes:
            attributes_q.delete_attributes_by_type_ids(conn, item_id, update.remove_attributes)
        return _item_detail(conn, item_id)

    return ctx.mutate(f"Update item {item_id}", apply, base_version)


def delete_item(ctx: OperationContext, item_id: str, base_version: str | None = None) -> Versioned:
    def apply(conn: Connection) -> dict[str, Any]:
        items_q.delete_item(conn, item_id)
        return {"deleted": item_id}

    return ctx.mutate(f"Delete item {item_id}", apply, base_version)
