"""REST tests for /items and /attributes."""

from __future__ import annotations


def _create_type(client, name: str) -> str:
    return client.post("/attribute-types", json={"name": name}).json()["data"]["id"]


def _create_item(client, body: str = "hello") -> dict:
    resp = client.post("/items", json={"body": body})
    assert resp.status_code == 201
    return resp.json()


class TestCreateAndGet:
    def test_create(self, api_client, sqlite_store):
        resp = api_client.post("/items", json={"body": "hello"})
        assert resp.status_code == 201
        payload = resp.json()
        assert payload["data"]["body"] == "hello"
        assert payload["version"] == sqlite_store.version
        assert resp.headers["ETag"] == payload["version"]

    def test_get(self, api_client):
        item = _create_item(api_client)["data"]
        resp = api_client.get(f"/items/{item['id']}")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["id"] == item["id"]
        assert data["attributes"] == []
        assert data["linkages"] == []

    def test_get_as_of_reports_that_version(self, api_client):
        created = _create_item(api_client)
        resp = api_client.get(
            f"/items/{created['data']['id']}", params={"as_of": created["version"]}
        )
        assert resp.status_code == 200
        assert resp.json()["version"] == created["version"]
        assert resp.headers["ETag"] == created["version"]

    def test_get_unknown_as_of(self, api_client):
        item = _create_item(api_client)["data"]
        resp = api_client.get(f"/items/{item['id']}", params={"as_of": "f" * 32})
        assert resp.status_code == 400
        assert resp.json()["code"] == "UNKNOWN_VERSION"

    def test_get_missing(self, api_client):
        resp = api_client.get("/items/nope")
        assert resp.status_code == 404
        body = resp.json()
        assert body["code"] == "NOT_FOUND"
        assert body["instance"] == "/items/nope"

    def test_body_required(self, api_client):
        assert api_client.post("/items", json={}).status_code == 422


class TestList:
    def test_list_with_attribute_filter(self, api_client):
        color = _create_type(api_client, "color")
        red = _create_item(api_client, "red one")["data"]
        _create_item(api_client, "plain")
        api_client.patch(
            f"/items/{red['id']}",
            json={"attributes": {"set": [{"type_id": color, "value": "red"}]}},
        )

        everything = api_client.get("/items").json()["data"]
        filtered = api_client.get("/items", params={"attr.color": "red"}).json()["data"]

        assert len(everything) == 2
        assert [i["id"] for i in filtered] == [red["id"]]

    def test_limit_bounds(self, api_client):
        assert api_client.get("/items", params={"limit": 0}).status_code == 422
        assert api_client.get("/items", params={"limit": 1}).status_code == 200


class TestUpdate:
    def test_patch_body_and_attributes(self, api_client):
        color = _create_type(api_client, "color")
        created = _create_item(api_client)
        resp = api_client.patch(
            f"/items/{created['data']['id']}",
            json={"body": "changed", "attributes": {"set": [{"type_id": color, "value": "red"}]}},
            headers={"If-Match": f'"{created["version"]}"'},
        )
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["body"] == "changed"
        assert [a["value"] for a in data["attributes"]] == ["red"]
        assert resp.headers["ETag"] != created["version"]

    def test_empty_patch(self, api_client):
        item = _create_item(api_client)["data"]
        resp = api_client.patch(f"/items/{item['id']}", json={})
        assert resp.status_code == 400
        assert resp.json()["code"] == "VALIDATION_FAILED"

    def test_unknown_if_match(self, api_client):
        item = _create_item(api_client)["data"]
        resp = api_client.patch(
            f"/items/{item['id']}", json={"body": "x"}, headers={"If-Match": "f" * 32}
        )
        assert resp.status_code == 400
        body = resp.json()
        assert body["code"] == "UNKNOWN_VERSION"
        assert body["details"]["base_version"] == "f" * 32

    def test_wildcard_if_match_uses_head(self, api_client):
        item = _create_item(api_client)["data"]
        resp = api_client.patch(f"/items/{item['id']}", json={"body": "x"}, headers={"If-Match": "*"})
        assert resp.status_code == 200


class TestDelete:
    def test_delete(self, api_client, sqlite_store):
        item = _create_item(api_client)["data"]
        resp = api_client.delete(f"/items/{item['id']}")
        assert resp.status_code == 204
        assert resp.content == b""
        assert resp.headers["ETag"] == sqlite_store.version
        assert api_client.get(f"/items/{item['id']}").status_code == 404

    def test_delete_missing(self, api_client):
        assert api_client.delete("/items/nope").status_code == 404


class TestItemHistory:
    def test_history(self, api_client, sqlite_store):
        created = _create_item(api_client)
        item_id = created["data"]["id"]
        sqlite_store.record_item_change(created["version"], item_id)
        resp = api_client.get(f"/items/{item_id}/history")
        assert resp.status_code == 200
        assert [c["hash"] for c in resp.json()["data"]] == [created["version"]]


class TestAttributes:
    def test_get_patch_delete(self, api_client):
        color = _create_type(api_client, "color")
        item = _create_item(api_client)["data"]
        detail = api_client.patch(
            f"/items/{item['id']}",
            json={"attributes": {"set": [{"type_id": color, "value": "red"}]}},
        ).json()["data"]
        attribute_id = detail["attributes"][0]["id"]

        assert api_client.get(f"/attributes/{attribute_id}").json()["data"]["value"] == "red"
        patched = api_client.patch(f"/attributes/{attribute_id}", json={"value": "blue"})
        assert patched.json()["data"]["value"] == "blue"
        assert api_client.delete(f"/attributes/{attribute_id}").status_code == 204
        assert api_client.get(f"/attributes/{attribute_id}").status_code == 404
