"""Tests for the vds error hierarchy."""

from __future__ import annotations

import pytest

from vds.core.errors import (
    AlreadyExistsError,
    BranchCreateError,
    ConflictError,
    ErrorCategory,
    InUseError,
    LockTimeoutError,
    NotFoundError,
    ResourceUnavailableError,
    StoreError,
    StoreUnavailableError,
    UnknownVersionError,
    ValidationError,
    VdsError,
    error_code,
    is_retryable,
)


class TestCodes:
    @pytest.mark.parametrize(
        ("error", "code"),
        [
            (ValidationError("bad"), "VALIDATION_FAILED"),
            (NotFoundError("item", "x"), "NOT_FOUND"),
            (InUseError("attribute_type", "t"), "IN_USE"),
            (AlreadyExistsError("dup"), "ALREADY_EXISTS"),
            (ConflictError("c"), "CONFLICT"),
            (LockTimeoutError("l"), "LOCK_TIMEOUT"),
            (StoreError("s"), "STORE_ERROR"),
            (StoreUnavailableError("u"), "UNAVAILABLE"),
            (BranchCreateError("b"), "BRANCH_CREATE_FAILED"),
            (UnknownVersionError("abc"), "UNKNOWN_VERSION"),
            (ResourceUnavailableError("r"), "RESOURCE_UNAVAILABLE"),
        ],
    )
    def test_code(self, error, code):
        assert error.code == code
        assert error_code(error) == code

    def test_foreign_exception_is_internal(self):
        assert error_code(RuntimeError("x")) == "INTERNAL"


class TestHierarchy:
    def test_crud_errors_are_validation_errors(self):
        assert isinstance(NotFoundError("item", "x"), ValidationError)
        assert isinstance(InUseError("item", "x"), ValidationError)
        assert isinstance(AlreadyExistsError("x"), ValidationError)

    def test_unknown_version_is_branch_create_error(self):
        err = UnknownVersionError("deadbeef")
        assert isinstance(err, BranchCreateError)
        assert isinstance(err, StoreError)
        assert err.category is ErrorCategory.VALIDATION
        assert err.context.base_version == "deadbeef"

    def test_conflict_is_not_validation(self):
        assert not isinstance(ConflictError("c"), ValidationError)


class TestRetrySemantics:
    def test_retryable_errors(self):
        assert is_retryable(ConflictError("c"))
        assert is_retryable(LockTimeoutError("l"))
        assert is_retryable(StoreUnavailableError("u"))
        assert is_retryable(ResourceUnavailableError("r"))
        assert is_retryable(ConnectionError())

    def test_non_retryable_errors(self):
        assert not is_retryable(NotFoundError("item", "x"))
        assert not is_retryable(StoreError("s"))
        assert not is_retryable(ValueError())

    def test_retry_after(self):
        err = LockTimeoutError("busy", retry_after=10)
        assert err.retry_after == 10
        assert err.to_dict()["retry_after"] == 10


class TestContext:
    def test_not_found_message_and_context(self):
        err = NotFoundError("item", "abc")
        assert str(err) == "item not found: abc"
        assert err.context.entity == "item"
        assert err.context.entity_id == "abc"

    def test_with_context_sets_known_fields_and_metadata(self):
        err = VdsError("boom").with_context(branch="vds-mut-1", lock="vds_merge")
        assert err.context.branch == "vds-mut-1"
        assert err.context.metadata == {"lock": "vds_merge"}
        assert err.context.to_dict() == {"branch": "vds-mut-1", "lock": "vds_merge"}

    def test_to_dict(self):
        cause = RuntimeError("driver said no")
        err = StoreError("commit failed", cause=cause, details={"n": 1})
        data = err.to_dict()
        assert data["error_type"] == "StoreError"
        assert data["code"] == "STORE_ERROR"
        assert data["category"] == "DATABASE"
        assert data["retryable"] is False
        assert data["details"] == {"n": 1}
        assert data["cause"] == "driver said no"
        assert err.__cause__ is cause

    def test_empty_context_omitted(self):
        assert "context" not in VdsError("x").to_dict()
