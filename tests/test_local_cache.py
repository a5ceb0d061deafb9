"""Tests for the device-local cache."""

import json

import pytest

from expense_tracker.models.migration import MigrationFlag
from expense_tracker.services.local_cache import (
    InMemoryLocalCache,
    JsonFileLocalCache,
    LocalCacheError,
)


EXPENSE = {
    "id": "0c2a3f4e-5b6d-4e7f-8a9b-0c1d2e3f4a5b",
    "date": "2026-09-01",
    "category": "food",
    "description": "Tea",
    "amount": 20,
    "paymentMethod": "cash",
}
BUDGET = {"month": "2026-09", "amount": 5000}


@pytest.fixture
def cache_file(tmp_path):
    return tmp_path / "cache" / "local_cache.json"


class TestJsonFileLocalCache:
    """Tests for the JSON file cache."""

    def test_missing_file_reads_as_empty(self, cache_file):
        cache = JsonFileLocalCache(cache_file)
        assert cache.load_expenses() == []
        assert cache.load_budgets() == []
        assert cache.get_migration_flag() == MigrationFlag.ABSENT
        assert not cache.has_records()

    def test_reads_records(self, cache_file):
        cache_file.parent.mkdir(parents=True)
        cache_file.write_text(json.dumps({"expenses": [EXPENSE], "budgets": [BUDGET]}))

        cache = JsonFileLocalCache(cache_file)
        assert cache.load_expenses() == [EXPENSE]
        assert cache.load_budgets() == [BUDGET]
        assert cache.has_records()

    def test_corrupt_file_reads_as_empty(self, cache_file):
        cache_file.parent.mkdir(parents=True)
        cache_file.write_text("{not json")

        cache = JsonFileLocalCache(cache_file)
        assert cache.load_expenses() == []
        assert cache.get_migration_flag() == MigrationFlag.ABSENT

    def test_non_list_sections_ignored(self, cache_file):
        cache_file.parent.mkdir(parents=True)
        cache_file.write_text(json.dumps({"expenses": {"a": 1}, "budgets": [BUDGET, "x"]}))

        cache = JsonFileLocalCache(cache_file)
        assert cache.load_expenses() == []
        assert cache.load_budgets() == [BUDGET]

    def test_flag_persists(self, cache_file):
        JsonFileLocalCache(cache_file).set_migration_flag(MigrationFlag.PENDING)
        assert JsonFileLocalCache(cache_file).get_migration_flag() == MigrationFlag.PENDING

    def test_unknown_flag_reads_as_absent(self, cache_file):
        cache_file.parent.mkdir(parents=True)
        cache_file.write_text(json.dumps({"migration_flag": "maybe"}))
        assert JsonFileLocalCache(cache_file).get_migration_flag() == MigrationFlag.ABSENT

    def test_clear_keeps_flag(self, cache_file):
        cache_file.parent.mkdir(parents=True)
        cache_file.write_text(json.dumps({
            "expenses": [EXPENSE],
            "budgets": [BUDGET],
            "migration_flag": "pending",
        }))

        cache = JsonFileLocalCache(cache_file)
        cache.clear_records()
        assert not cache.has_records()
        assert cache.get_migration_flag() == MigrationFlag.PENDING

    def test_write_failure_raises(self, tmp_path):
        # A directory where the file should be cannot be opened for writing
        blocked = tmp_path / "blocked"
        blocked.mkdir()

        with pytest.raises(LocalCacheError):
            JsonFileLocalCache(blocked).set_migration_flag(MigrationFlag.COMPLETED)


class TestInMemoryLocalCache:

    def test_returns_copies(self):
        cache = InMemoryLocalCache(expenses=[dict(EXPENSE)])
        cache.load_expenses()[0]["amount"] = 999
        assert cache.expenses[0]["amount"] == 20

    def test_clear_records(self):
        cache = InMemoryLocalCache(expenses=[EXPENSE], budgets=[BUDGET])
        cache.clear_records()
        assert not cache.has_records()
