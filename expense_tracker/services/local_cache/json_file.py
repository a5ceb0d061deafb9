"""
JSON File Local Cache

The device-local cache as one JSON document:

    {
      "expenses": [...],
      "budgets": [...],
      "migration_flag": "absent" | "pending" | "completed"
    }

A missing or unreadable file reads as an empty cache with the flag
absent. Writes replace the whole document.
"""

import json
from pathlib import Path
from typing import Any, Optional

import structlog

from expense_tracker.config import get_settings
from expense_tracker.models.migration import MigrationFlag
from expense_tracker.services.local_cache.interface import (
    LocalCacheError,
    LocalCacheInterface,
)


logger = structlog.get_logger(__name__)

DEFAULT_DOCUMENT: dict[str, Any] = {
    "expenses": [],
    "budgets": [],
    "migration_flag": MigrationFlag.ABSENT.value,
}


class JsonFileLocalCache(LocalCacheInterface):
    """LocalCacheInterface stored in a JSON file."""

    def __init__(self, path: Optional[Path] = None):
        self._path = Path(path) if path else get_settings().local_cache.path

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            return dict(DEFAULT_DOCUMENT)
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("local_cache_unreadable", path=str(self._path), error=str(e))
            return dict(DEFAULT_DOCUMENT)
        if not isinstance(data, dict):
            return dict(DEFAULT_DOCUMENT)

        merged = dict(DEFAULT_DOCUMENT)
        merged.update({k: v for k, v in data.items() if k in DEFAULT_DOCUMENT})
        for key in ("expenses", "budgets"):
            if not isinstance(merged[key], list):
                merged[key] = []
        return merged

    def _write(self, document: dict[str, Any]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("w", encoding="utf-8") as handle:
                json.dump(document, handle, indent=2, sort_keys=True)
        except OSError as e:
            raise LocalCacheError(f"Failed to write local cache {self._path}: {e}") from e

    def load_expenses(self) -> list[dict]:
        return [r for r in self._read()["expenses"] if isinstance(r, dict)]

    def load_budgets(self) -> list[dict]:
        return [r for r in self._read()["budgets"] if isinstance(r, dict)]

    def clear_records(self) -> None:
        document = self._read()
        document["expenses"] = []
        document["budgets"] = []
        self._write(document)

    def get_migration_flag(self) -> MigrationFlag:
        try:
            return MigrationFlag(self._read()["migration_flag"])
        except ValueError:
            return MigrationFlag.ABSENT

    def set_migration_flag(self, flag: MigrationFlag) -> None:
        document = self._read()
        document["migration_flag"] = MigrationFlag(flag).value
        self._write(document)
