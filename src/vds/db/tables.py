"""Table definitions — items, typed attributes, typed linkages, schema blob.

Tags:
    vds, orm, sqlalchemy, tables

Doc-Types:
    api-reference, data-model
"""

from __future__ import annotations

import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text, UniqueConstraint, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

ID = String(36)


class VdsBase(DeclarativeBase):
    """Declarative base for every vds table."""


def _created_at() -> Mapped[datetime.datetime]:
    return mapped_column(DateTime, nullable=False, server_default=func.current_timestamp())


class ItemTable(VdsBase):
    __tablename__ = "items"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime.datetime] = _created_at()


class AttributeTypeTable(VdsBase):
    __tablename__ = "attribute_types"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    created_at: Mapped[datetime.datetime] = _created_at()


class LinkageTypeTable(VdsBase):
    __tablename__ = "linkage_types"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    created_at: Mapped[datetime.datetime] = _created_at()


class AttributeTable(VdsBase):
    __tablename__ = "attributes"
    __table_args__ = (UniqueConstraint("item_id", "type_id"),)

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    item_id: Mapped[str] = mapped_column(
        ID, ForeignKey("items.id", ondelete="CASCADE"), nullable=False
    )
    type_id: Mapped[str] = mapped_column(
        ID, ForeignKey("attribute_types.id", ondelete="RESTRICT"), nullable=False
    )
    value: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime.datetime] = _created_at()


class LinkageTable(VdsBase):
    __tablename__ = "linkages"
    __table_args__ = (UniqueConstraint("source_id", "target_id", "type_id"),)

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    source_id: Mapped[str] = mapped_column(
        ID, ForeignKey("items.id", ondelete="CASCADE"), nullable=False
    )
    target_id: Mapped[str] = mapped_column(
        ID, ForeignKey("items.id", ondelete="CASCADE"), nullable=False
    )
    type_id: Mapped[str] = mapped_column(
        ID, ForeignKey("linkage_types.id", ondelete="RESTRICT"), nullable=False
    )
    created_at: Mapped[datetime.datetime] = _created_at()


class SchemaBlobTable(VdsBase):
    __tablename__ = "schema_blob"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime.datetime] = _created_at()


TABLE_NAMES = frozenset(VdsBase.metadata.tables)
