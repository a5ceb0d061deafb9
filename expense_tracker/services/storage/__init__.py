"""
Storage Services Package

Provides the abstract storage interface, the owner-scoped row store
and its backends (Google Sheets and in-memory).
"""

from expense_tracker.services.storage.interface import (
    AccessDeniedError,
    ConnectionError,
    DuplicateError,
    ExpenseStorageInterface,
    NotFoundError,
    StorageError,
    StoreError,
)
from expense_tracker.services.storage.backend import RowStore
from expense_tracker.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsRowStore,
)
from expense_tracker.services.storage.memory import (
    InMemoryDatabase,
    InMemoryRowStore,
)
from expense_tracker.services.storage.repository import RemoteExpenseStorage

__all__ = [
    # Interfaces
    "ExpenseStorageInterface",
    "RowStore",
    # Exceptions
    "AccessDeniedError",
    "ConnectionError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    "StoreError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsRowStore",
    "InMemoryDatabase",
    "InMemoryRowStore",
    "RemoteExpenseStorage",
]
