"""Device-local cache package."""

from expense_tracker.services.local_cache.interface import (
    LocalCacheError,
    LocalCacheInterface,
)
from expense_tracker.services.local_cache.json_file import JsonFileLocalCache
from expense_tracker.services.local_cache.memory import InMemoryLocalCache

__all__ = [
    "InMemoryLocalCache",
    "JsonFileLocalCache",
    "LocalCacheError",
    "LocalCacheInterface",
]
