"""Tests for BranchedMutationOrchestrator over the in-memory store."""

from __future__ import annotations

import pytest

from tests._support.fake_store import FakeSessionPool
from vds.branching import BranchedMutationOrchestrator
from vds.core.errors import (
    ConflictError,
    LockTimeoutError,
    ResourceUnavailableError,
    StoreError,
    UnknownVersionError,
    ValidationError,
)


def _set_body(row_id: str, body: str):
    def unit_of_work(session):
        session.write("items", row_id, body=body)
        return {"id": row_id, "body": body}

    return unit_of_work


def _assert_clean(store, pool):
    assert store.branch_names("vds-mut-") == []
    assert pool.held == 0
    assert pool.double_releases == 0
    assert all(count == 1 for count in pool.release_calls.values())


class TestSuccess:
    def test_merges_into_trunk(self, fake_store, fake_pool, orchestrator):
        base = fake_store.trunk_head
        outcome = orchestrator.run("Create item x", _set_body("x", "hello"))

        assert outcome.result == {"id": "x", "body": "hello"}
        assert outcome.version == fake_store.trunk_head
        assert outcome.version != base
        assert outcome.base_version == base
        assert outcome.branch.startswith("vds-mut-")
        assert fake_store.read("items", "x", "body") == "hello"
        assert fake_store.commits[fake_store.trunk_head].message == "Create item x"
        _assert_clean(fake_store, fake_pool)

    def test_session_returned_for_reuse(self, fake_store, fake_pool, orchestrator):
        orchestrator.run("one", _set_body("x", "1"))
        assert fake_pool.returned and not fake_pool.discarded
        orchestrator.run("two", _set_body("y", "2"))
        assert fake_store.read("items", "x", "body") == "1"
        assert fake_store.read("items", "y", "body") == "2"

    def test_stale_base_without_overlap_merges(self, fake_store, fake_pool, orchestrator):
        fake_store.seed("items", "x", body="x0")
        stale = fake_store.seed("items", "y", body="y0")
        orchestrator.run("edit x", _set_body("x", "x1"))

        outcome = orchestrator.run("edit y", _set_body("y", "y1"), base_version=stale)

        assert outcome.base_version == stale
        assert fake_store.read("items", "x", "body") == "x1"
        assert fake_store.read("items", "y", "body") == "y1"
        _assert_clean(fake_store, fake_pool)

    def test_empty_commit_still_advances_history(self, fake_store, orchestrator):
        outcome = orchestrator.run("noop", lambda session: None)
        assert outcome.result is None
        assert outcome.version == fake_store.trunk_head


class TestFailures:
    def test_message_required(self, fake_pool, orchestrator):
        with pytest.raises(ValidationError):
            orchestrator.run("", _set_body("x", "1"))
        assert fake_pool.release_calls == {}

    def test_unit_of_work_error_propagates_unchanged(self, fake_store, fake_pool, orchestrator):
        head = fake_store.trunk_head
        boom = ValidationError("body is required")

        def failing(session):
            session.write("items", "x", body="partial")
            raise boom

        with pytest.raises(ValidationError) as exc_info:
            orchestrator.run("Create item x", failing)

        assert exc_info.value is boom
        assert exc_info.value.context.branch.startswith("vds-mut-")
        assert exc_info.value.context.base_version == head
        assert fake_store.trunk_head == head
        _assert_clean(fake_store, fake_pool)

    def test_unexpected_exception_cleans_up(self, fake_store, fake_pool, orchestrator):
        def crash(session):
            raise KeyError("bug")

        with pytest.raises(KeyError):
            orchestrator.run("crash", crash)
        _assert_clean(fake_store, fake_pool)

    def test_conflict(self, fake_store, fake_pool, orchestrator):
        base = fake_store.seed("items", "x", body="old")
        orchestrator.run("first", _set_body("x", "first"))
        head = fake_store.trunk_head

        with pytest.raises(ConflictError) as exc_info:
            orchestrator.run("second", _set_body("x", "second"), base_version=base)

        err = exc_info.value
        assert err.retryable
        assert err.details == {"conflicts": 1}
        assert err.context.base_version == base
        assert fake_store.trunk_head == head
        assert fake_store.read("items", "x", "body") == "first"
        _assert_clean(fake_store, fake_pool)

    def test_unknown_base_version(self, fake_store, fake_pool, orchestrator):
        with pytest.raises(UnknownVersionError):
            orchestrator.run("edit", _set_body("x", "1"), base_version="f" * 32)
        _assert_clean(fake_store, fake_pool)

    def test_lock_timeout_discards_branch(self, fake_store, fake_pool, orchestrator):
        holder = fake_store.connect()
        holder.acquire_lock("vds_merge", 0)
        head = fake_store.trunk_head

        with pytest.raises(LockTimeoutError) as exc_info:
            orchestrator.run("edit", _set_body("x", "1"), lock_timeout_ms=50)

        assert exc_info.value.retryable
        assert fake_store.trunk_head == head
        _assert_clean(fake_store, fake_pool)
        holder.release_lock("vds_merge")

    def test_pool_exhausted(self, fake_store, lifecycle, coordinator):
        pool = FakeSessionPool(fake_store, size=1, timeout_s=0.05)
        orchestrator = BranchedMutationOrchestrator(pool, lifecycle, coordinator)
        held = pool.acquire()
        try:
            with pytest.raises(ResourceUnavailableError):
                orchestrator.run("edit", _set_body("x", "1"))
        finally:
            pool.release(held)
        assert fake_store.branch_names("vds-mut-") == []

    def test_commit_failure(self, fake_store, fake_pool, orchestrator):
        fake_store.inject_fault("commit", StoreError("disk full"))
        with pytest.raises(StoreError, match="disk full"):
            orchestrator.run("edit", _set_body("x", "1"))
        _assert_clean(fake_store, fake_pool)


class TestCleanupFailures:
    def test_stuck_on_branch_discards_session(self, fake_store, fake_pool, orchestrator):
        # unit of work fails, then the trunk checkout during cleanup fails too
        def failing(session):
            fake_store.inject_fault("checkout", StoreError("checkout refused"))
            raise ValidationError("bad input")

        with pytest.raises(ValidationError, match="bad input"):
            orchestrator.run("edit", failing)

        assert len(fake_pool.discarded) == 1
        assert fake_pool.held == 0
        # the branch could not be deleted from the session parked on it
        assert len(fake_store.branch_names("vds-mut-")) == 1

    def test_delete_failure_does_not_fail_mutation(self, fake_store, fake_pool, orchestrator):
        fake_store.inject_fault("delete_branch", StoreError("delete refused"))
        outcome = orchestrator.run("edit", _set_body("x", "1"))
        assert fake_store.read("items", "x", "body") == "1"
        assert outcome.version == fake_store.trunk_head
        assert fake_pool.held == 0
        assert len(fake_store.branch_names("vds-mut-")) == 1

    def test_abort_failure_discards_session(self, fake_store, fake_pool, orchestrator):
        base = fake_store.seed("items", "x", body="old")
        orchestrator.run("first", _set_body("x", "red"))
        head = fake_store.trunk_head
        fake_store.inject_fault("abort_merge", StoreError("abort refused"))

        with pytest.raises(StoreError, match="abort refused"):
            orchestrator.run("second", _set_body("x", "blue"), base_version=base)

        assert fake_store.trunk_head == head
        assert fake_store.read("items", "x", "body") == "red"
        assert len(fake_pool.discarded) == 1
        assert fake_pool.discarded[0].merge_pending
        assert fake_pool.discarded[0].closed
        assert fake_store.branch_names("vds-mut-") == []
        assert fake_pool.held == 0
        assert "vds_merge" not in fake_store.lock_owners
