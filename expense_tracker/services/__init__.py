"""Services package."""

from expense_tracker.services.local_cache import (
    InMemoryLocalCache,
    JsonFileLocalCache,
    LocalCacheError,
    LocalCacheInterface,
)
from expense_tracker.services.storage import (
    AccessDeniedError,
    ConnectionError,
    DuplicateError,
    ExpenseStorageInterface,
    GoogleSheetsClient,
    GoogleSheetsRowStore,
    InMemoryDatabase,
    InMemoryRowStore,
    NotFoundError,
    RemoteExpenseStorage,
    RowStore,
    StorageError,
    StoreError,
)

__all__ = [
    # Local cache
    "InMemoryLocalCache",
    "JsonFileLocalCache",
    "LocalCacheError",
    "LocalCacheInterface",
    # Storage services
    "AccessDeniedError",
    "ConnectionError",
    "DuplicateError",
    "ExpenseStorageInterface",
    "GoogleSheetsClient",
    "GoogleSheetsRowStore",
    "InMemoryDatabase",
    "InMemoryRowStore",
    "NotFoundError",
    "RemoteExpenseStorage",
    "RowStore",
    "StorageError",
    "StoreError",
]
