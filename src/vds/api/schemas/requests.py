"""Request bodies accepted by the REST API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from vds.ops.items import AttributeSet, ItemUpdate
from vds.ops.linkages import NewLinkage


class CreateItemRequest(BaseModel):
    body: str = Field(description="Item body text")


class AttributeSetSchema(BaseModel):
    type_id: str
    value: str


class AttributeChangesSchema(BaseModel):
    set: list[AttributeSetSchema] = Field(default_factory=list)
    remove: list[str] = Field(default_factory=list, description="Attribute type ids to remove")


class UpdateItemRequest(BaseModel):
    """Partial update; at least one of ``body``, ``attributes.set`` or
    ``attributes.remove`` must be present."""

    body: str | None = None
    attributes: AttributeChangesSchema | None = None

    def to_update(self) -> ItemUpdate:
        changes = self.attributes or AttributeChangesSchema()
        return ItemUpdate(
            body=self.body,
            set_attributes=[AttributeSet(a.type_id, a.value) for a in changes.set],
            remove_attributes=list(changes.remove),
        )


class UpdateAttributeRequest(BaseModel):
    value: str


class CreateTypeRequest(BaseModel):
    name: str = Field(min_length=1)


class CreateLinkageRequest(BaseModel):
    source_id: str
    target_id: str
    type_id: str

    def to_linkage(self) -> NewLinkage:
        return NewLinkage(self.source_id, self.target_id, self.type_id)


class SetSchemaRequest(BaseModel):
    body: str | None = None
