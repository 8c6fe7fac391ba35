"""Tests for point-in-time table references."""

from __future__ import annotations

import pytest

from vds.core.errors import ValidationError
from vds.db.asof import as_of_params, as_of_table, is_timestamp


class TestAsOfTable:
    def test_current(self):
        assert as_of_table("items") == "items"
        assert as_of_params(None) == {}

    def test_commit_ref(self):
        assert as_of_table("items", "a1b2c3") == "items AS OF :as_of"
        assert as_of_params("a1b2c3") == {"as_of": "a1b2c3"}

    def test_timestamp(self):
        assert as_of_table("linkages", "2026-01-31") == "linkages AS OF TIMESTAMP(:as_of)"
        assert is_timestamp("2026-01-31T10:00:00")
        assert not is_timestamp("main")

    def test_alias(self):
        assert as_of_table("items", "main", alias="i") == "items AS OF :as_of AS i"
        assert as_of_table("items", alias="i") == "items AS i"

    def test_unknown_table(self):
        with pytest.raises(ValidationError):
            as_of_table("items; DROP TABLE items")
