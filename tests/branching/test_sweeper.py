"""Tests for the orphan branch sweeper."""

from __future__ import annotations

from vds.branching import sweep_at_startup, sweep_orphans
from vds.core.errors import StoreError


class TestSweepOrphans:
    def test_deletes_only_mutation_branches(self, fake_store, lifecycle):
        head = fake_store.trunk_head
        for name in ("vds-mut-a", "vds-mut-b", "feature"):
            fake_store.branches[name] = head

        deleted = sweep_orphans(fake_store.connect(), lifecycle)

        assert deleted == 2
        assert fake_store.branch_names() == ["feature", "main"]
        assert fake_store.trunk_head == head

    def test_nothing_to_sweep(self, fake_store, lifecycle):
        assert sweep_orphans(fake_store.connect(), lifecycle) == 0

    def test_delete_failure_is_skipped(self, fake_store, lifecycle):
        head = fake_store.trunk_head
        fake_store.branches["vds-mut-a"] = head
        fake_store.branches["vds-mut-b"] = head
        fake_store.inject_fault("delete_branch", StoreError("locked"))

        assert sweep_orphans(fake_store.connect(), lifecycle) == 1
        assert len(fake_store.branch_names("vds-mut-")) == 1


class TestSweepAtStartup:
    def test_uses_pooled_session(self, fake_store, fake_pool, lifecycle):
        fake_store.branches["vds-mut-left-behind"] = fake_store.trunk_head
        assert sweep_at_startup(fake_pool, lifecycle) == 1
        assert fake_pool.held == 0
        assert fake_store.branch_names("vds-mut-") == []
