"""Tests for the typed-error to HTTP mapping."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from vds.api import create_app
from vds.api.middleware.errors import ERROR_CODE_TO_STATUS, status_for_error_code
from vds.core.errors import (
    AlreadyExistsError,
    ConflictError,
    InUseError,
    LockTimeoutError,
    NotFoundError,
    ResourceUnavailableError,
    StoreError,
    StoreUnavailableError,
    UnknownVersionError,
    ValidationError,
)
from vds.core.settings import VdsSettings


def _client_raising(exc: Exception, *, debug: bool = False) -> TestClient:
    settings = VdsSettings(_env_file=None, debug=debug)
    app = create_app(settings=settings, runtime=object())

    @app.get("/boom")
    def boom():
        raise exc

    return TestClient(app, raise_server_exceptions=False)


class TestStatusTable:
    def test_unknown_code_is_500(self):
        assert status_for_error_code("BRANCH_CREATE_FAILED") == 500
        assert ERROR_CODE_TO_STATUS["CONFLICT"] == 409

    @pytest.mark.parametrize(
        ("exc", "status"),
        [
            (ValidationError("bad"), 400),
            (UnknownVersionError("abc"), 400),
            (NotFoundError("item", "x"), 404),
            (InUseError("attribute_type", "t"), 409),
            (AlreadyExistsError("dup"), 409),
            (ConflictError("conflict"), 409),
            (ResourceUnavailableError("pool"), 503),
            (StoreUnavailableError("down"), 503),
            (StoreError("statement failed"), 500),
        ],
    )
    def test_status(self, exc, status):
        resp = _client_raising(exc).get("/boom")
        assert resp.status_code == status
        assert resp.json()["code"] == exc.code


class TestProblemBody:
    def test_conflict_details(self):
        exc = ConflictError("conflicts with trunk", details={"conflicts": 2}).with_context(
            branch="vds-mut-1", base_version="abc"
        )
        body = _client_raising(exc).get("/boom").json()
        assert body["title"] == "conflicts with trunk"
        assert body["status"] == 409
        assert body["details"] == {"conflicts": 2, "branch": "vds-mut-1", "base_version": "abc"}
        assert body["instance"] == "/boom"

    def test_lock_timeout_retry_after(self):
        resp = _client_raising(LockTimeoutError("busy", retry_after=10)).get("/boom")
        assert resp.status_code == 503
        assert resp.headers["Retry-After"] == "10"
        assert resp.json()["code"] == "LOCK_TIMEOUT"

    def test_unhandled_exception(self):
        resp = _client_raising(RuntimeError("secret internals")).get("/boom")
        assert resp.status_code == 500
        body = resp.json()
        assert body["code"] == "INTERNAL"
        assert "secret" not in body["detail"]

    def test_unhandled_exception_debug(self):
        resp = _client_raising(RuntimeError("secret internals"), debug=True).get("/boom")
        assert resp.json()["detail"] == "secret internals"
