"""Tests for attribute type and linkage type operations."""

from __future__ import annotations

import pytest

from vds.core.errors import AlreadyExistsError, InUseError, ValidationError
from vds.ops import attribute_types, items, linkage_types, linkages
from vds.ops.items import AttributeSet, ItemUpdate
from vds.ops.linkages import NewLinkage


class TestAttributeTypeOps:
    def test_create_trims_name(self, op_context, sqlite_store):
        created = attribute_types.create_attribute_type(op_context, "  color ")
        assert created.data["name"] == "color"
        assert sqlite_store.messages[-1] == "Create attribute type 'color'"

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_name(self, op_context, sqlite_store, name):
        before = sqlite_store.version
        with pytest.raises(ValidationError):
            attribute_types.create_attribute_type(op_context, name)
        assert sqlite_store.version == before

    def test_duplicate_name(self, op_context):
        attribute_types.create_attribute_type(op_context, "color")
        with pytest.raises(AlreadyExistsError):
            attribute_types.create_attribute_type(op_context, "color")

    def test_list_and_delete(self, op_context, sqlite_store):
        created = attribute_types.create_attribute_type(op_context, "color").data
        assert [t["name"] for t in attribute_types.list_attribute_types(op_context).data] == ["color"]
        deleted = attribute_types.delete_attribute_type(op_context, created["id"])
        assert deleted.data == {"deleted": created["id"]}
        assert sqlite_store.messages[-1] == f"Delete attribute type {created['id']}"
        assert attribute_types.list_attribute_types(op_context).data == []

    def test_delete_in_use(self, op_context):
        color = attribute_types.create_attribute_type(op_context, "color").data
        item = items.create_item(op_context, "x").data
        items.update_item(
            op_context, item["id"], ItemUpdate(set_attributes=[AttributeSet(color["id"], "red")])
        )
        with pytest.raises(InUseError):
            attribute_types.delete_attribute_type(op_context, color["id"])


class TestLinkageTypeOps:
    def test_lifecycle(self, op_context, sqlite_store):
        created = linkage_types.create_linkage_type(op_context, "depends-on")
        assert sqlite_store.messages[-1] == "Create linkage type 'depends-on'"
        listed = linkage_types.list_linkage_types(op_context)
        assert [t["id"] for t in listed.data] == [created.data["id"]]
        linkage_types.delete_linkage_type(op_context, created.data["id"])
        assert sqlite_store.messages[-1] == f"Delete linkage type {created.data['id']}"

    def test_delete_in_use(self, op_context):
        dep = linkage_types.create_linkage_type(op_context, "depends-on").data
        a = items.create_item(op_context, "a").data
        b = items.create_item(op_context, "b").data
        linkages.create_linkage(op_context, NewLinkage(a["id"], b["id"], dep["id"]))
        with pytest.raises(InUseError):
            linkage_types.delete_linkage_type(op_context, dep["id"])
