"""Concurrent mutations driven by real threads against the in-memory store."""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from vds.core.errors import ConflictError, LockTimeoutError

pytestmark = pytest.mark.concurrency


def _set_body(row_id: str, body: str, barrier: threading.Barrier | None = None):
    def unit_of_work(session):
        session.write("items", row_id, body=body)
        if barrier is not None:
            barrier.wait(timeout=5)
        return body

    return unit_of_work


def _run_all(orchestrator, jobs):
    """Run ``(message, unit_of_work, base)`` jobs in parallel; return outcomes or errors."""

    def call(job):
        message, unit_of_work, base = job
        try:
            return orchestrator.run(message, unit_of_work, base_version=base)
        except Exception as exc:  # noqa: BLE001
            return exc

    with ThreadPoolExecutor(max_workers=len(jobs)) as pool:
        return list(pool.map(call, jobs))


def _assert_no_leaks(store, pool):
    assert store.branch_names("vds-mut-") == []
    assert pool.held == 0
    assert pool.double_releases == 0
    assert all(count == 1 for count in pool.release_calls.values())


class TestConcurrentMutations:
    def test_disjoint_edits_from_same_base_both_land(self, fake_store, fake_pool, orchestrator):
        fake_store.seed("items", "a", body="a0")
        base = fake_store.seed("items", "b", body="b0")
        barrier = threading.Barrier(2)

        results = _run_all(
            orchestrator,
            [
                ("edit a", _set_body("a", "a1", barrier), base),
                ("edit b", _set_body("b", "b1", barrier), base),
            ],
        )

        assert not [r for r in results if isinstance(r, Exception)]
        assert fake_store.read("items", "a", "body") == "a1"
        assert fake_store.read("items", "b", "body") == "b1"
        _assert_no_leaks(fake_store, fake_pool)

    def test_same_cell_exactly_one_wins(self, fake_store, fake_pool, orchestrator):
        base = fake_store.seed("items", "x", body="old")
        barrier = threading.Barrier(2)

        results = _run_all(
            orchestrator,
            [
                ("writer one", _set_body("x", "one", barrier), base),
                ("writer two", _set_body("x", "two", barrier), base),
            ],
        )

        conflicts = [r for r in results if isinstance(r, ConflictError)]
        winners = [r for r in results if not isinstance(r, Exception)]
        assert len(conflicts) == 1
        assert len(winners) == 1
        assert fake_store.read("items", "x", "body") == winners[0].result
        assert fake_store.trunk_head == winners[0].version
        _assert_no_leaks(fake_store, fake_pool)

    def test_many_writers_on_distinct_rows(self, fake_store, fake_pool, orchestrator):
        jobs = [(f"create r{n}", _set_body(f"r{n}", str(n)), None) for n in range(8)]

        results = _run_all(orchestrator, jobs)

        assert not [r for r in results if isinstance(r, Exception)]
        snapshot = fake_store.snapshot()
        assert {row: cols["body"] for row, cols in snapshot["items"].items()} == {
            f"r{n}": str(n) for n in range(8)
        }
        _assert_no_leaks(fake_store, fake_pool)

    def test_merges_never_overlap(self, fake_store, fake_pool, orchestrator):
        fake_store.merge_delay_s = 0.01
        jobs = [(f"create r{n}", _set_body(f"r{n}", "v"), None) for n in range(6)]

        results = _run_all(orchestrator, jobs)

        assert not [r for r in results if isinstance(r, Exception)]
        assert fake_store.max_concurrent_merges == 1
        assert len(fake_store.merged_branches) == 6

    def test_work_runs_in_parallel_outside_merge_lock(self, fake_store, fake_pool, orchestrator):
        # all three units of work must be in flight together to pass the barrier
        barrier = threading.Barrier(3)
        jobs = [(f"w{n}", _set_body(f"w{n}", "v", barrier), None) for n in range(3)]

        results = _run_all(orchestrator, jobs)

        assert not [r for r in results if isinstance(r, Exception)]

    @pytest.mark.slow
    def test_lock_held_elsewhere_times_out(self, fake_store, fake_pool, orchestrator):
        holder = fake_store.connect()
        assert holder.acquire_lock("vds_merge", 0)
        head = fake_store.trunk_head

        started = time.monotonic()
        results = _run_all(
            orchestrator,
            [("a", _set_body("a", "1"), None), ("b", _set_body("b", "1"), None)],
        )
        elapsed = time.monotonic() - started

        assert all(isinstance(r, LockTimeoutError) for r in results)
        assert elapsed < 3
        assert fake_store.trunk_head == head
        _assert_no_leaks(fake_store, fake_pool)
        holder.close()

    def test_sweep_after_crash_leaves_trunk(self, fake_store, fake_pool, lifecycle, orchestrator):
        from vds.branching import sweep_at_startup

        orchestrator.run("first", _set_body("x", "1"))
        head = fake_store.trunk_head
        crashed = fake_store.connect()
        lifecycle.create_and_checkout(crashed, head)
        crashed.write("items", "x", body="never merged")
        crashed.commit("half done")
        crashed.close()

        assert sweep_at_startup(fake_pool, lifecycle) == 1
        assert fake_store.branch_names("vds-mut-") == []
        assert fake_store.trunk_head == head
        assert fake_store.read("items", "x", "body") == "1"
