"""Tests for the MCP tools, called directly against a SQLite runtime."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from vds.mcp import _app, server
from vds.mcp.response import mcp_err, to_mcp_error
from vds.core.errors import ConflictError

pytestmark = pytest.mark.asyncio


@pytest.fixture(autouse=True)
def installed_runtime(sqlite_runtime) -> Iterator[None]:
    _app.set_runtime(sqlite_runtime)
    yield
    _app.set_runtime(None)


class TestRegistration:
    async def test_tools_registered(self):
        names = {tool.name for tool in await server.mcp.list_tools()}
        assert {
            "create_item",
            "list_items",
            "get_item",
            "update_item",
            "delete_item",
            "list_attribute_types",
            "create_attribute_type",
            "delete_attribute_type",
            "list_linkage_types",
            "create_linkage_type",
            "delete_linkage_type",
            "list_linkages",
            "create_linkages",
            "remove_linkages",
            "get_schema",
            "set_schema",
            "list_history",
        } <= names

    async def test_create_server(self):
        assert server.create_server() is server.mcp


class TestItemTools:
    async def test_create_get_update_delete(self, sqlite_store):
        created = await server.create_item(body="hello")
        assert created["version"] == sqlite_store.version
        item_id = created["data"]["id"]

        color = await server.create_attribute_type(name="color")
        updated = await server.update_item(
            id=item_id,
            body="changed",
            attributes={"set": [{"type_id": color["data"]["id"], "value": "red"}]},
            version=created["version"],
        )
        assert updated["data"]["body"] == "changed"
        assert [a["value"] for a in updated["data"]["attributes"]] == ["red"]

        fetched = await server.get_item(id=item_id)
        assert fetched["data"]["body"] == "changed"

        listed = await server.list_items(filters={"color": "red"})
        assert [i["id"] for i in listed["data"]] == [item_id]

        deleted = await server.delete_item(id=item_id)
        assert deleted["data"] == {"deleted": item_id}
        missing = await server.get_item(id=item_id)
        assert missing["error"]["code"] == "NOT_FOUND"

    async def test_malformed_attributes(self):
        result = await server.update_item(id="x", attributes={"set": [{"value": "red"}]})
        assert result["error"]["code"] == "VALIDATION_FAILED"

    async def test_empty_update(self):
        created = await server.create_item(body="x")
        result = await server.update_item(id=created["data"]["id"])
        assert result["error"] == {"code": "VALIDATION_FAILED", "message": "No updates provided"}

    async def test_unknown_version(self):
        result = await server.create_item(body="x", version="f" * 32)
        assert result["error"]["code"] == "UNKNOWN_VERSION"


class TestCatalogAndLinkageTools:
    async def test_types_and_linkages(self):
        dep = (await server.create_linkage_type(name="depends-on"))["data"]["id"]
        a = (await server.create_item(body="a"))["data"]["id"]
        b = (await server.create_item(body="b"))["data"]["id"]

        created = await server.create_linkages(
            linkages=[{"source_id": a, "target_id": b, "type_id": dep}]
        )
        link_id = created["data"][0]["id"]
        assert [x["id"] for x in (await server.list_linkages(type_id=dep))["data"]] == [link_id]

        in_use = await server.delete_linkage_type(id=dep)
        assert in_use["error"]["code"] == "IN_USE"

        removed = await server.remove_linkages(ids=[link_id])
        assert removed["data"] == {"deleted": [link_id]}
        assert "data" in await server.delete_linkage_type(id=dep)
        assert (await server.list_linkage_types())["data"] == []

    async def test_malformed_linkage(self):
        result = await server.create_linkages(linkages=[{"source_id": "a"}])
        assert result["error"]["code"] == "VALIDATION_FAILED"

    async def test_duplicate_attribute_type(self):
        await server.create_attribute_type(name="color")
        result = await server.create_attribute_type(name="color")
        assert result["error"]["code"] == "ALREADY_EXISTS"
        assert [t["name"] for t in (await server.list_attribute_types())["data"]] == ["color"]


class TestSchemaAndHistoryTools:
    async def test_schema(self):
        assert (await server.get_schema())["data"] is None
        written = await server.set_schema(body="types: []")
        assert written["data"]["body"] == "types: []"

    async def test_history(self, sqlite_store):
        created = await server.create_item(body="a")
        sqlite_store.record_item_change(created["version"], created["data"]["id"])
        await server.set_schema(body="s")

        everything = await server.list_history()
        assert len(everything["data"]) == 2
        touched = await server.list_history(item_id=created["data"]["id"])
        assert [c["hash"] for c in touched["data"]] == [created["version"]]


class TestErrors:
    async def test_no_runtime(self):
        _app.set_runtime(None)
        result = await server.list_items()
        assert result["error"]["code"] == "RESOURCE_UNAVAILABLE"

    async def test_unexpected_exception_is_internal(self):
        def explode(ctx):
            raise RuntimeError("boom")

        result = await _app.call_op(explode)
        assert result == {"error": {"code": "INTERNAL", "message": "boom"}}

    async def test_error_payload_shapes(self):
        assert mcp_err("X", "m") == {"error": {"code": "X", "message": "m"}}
        payload = to_mcp_error(ConflictError("c", details={"conflicts": 1}))
        assert payload["error"]["details"] == {"conflicts": 1}


class TestLifespan:
    async def test_installed_runtime_is_kept(self, sqlite_runtime):
        async with _app.lifespan() as ctx:
            assert ctx.runtime is sqlite_runtime
            assert not ctx.owned
        assert _app.get_runtime() is sqlite_runtime
