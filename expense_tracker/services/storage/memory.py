"""
In-Memory Row Store

Keeps every table in process memory. Used by the test suite and for
running the core without Google credentials.

One InMemoryDatabase can be shared by several stores opened for
different sessions, which is how ownership isolation is exercised.
"""

from copy import deepcopy
from typing import Optional

from expense_tracker.models.session import AuthSession
from expense_tracker.services.storage.backend import RowStore
from expense_tracker.services.storage.rows import TABLE_COLUMNS


class InMemoryDatabase:
    """Tables of rows shared between stores."""

    def __init__(self):
        self.tables: dict[str, list[dict[str, str]]] = {
            table: [] for table in TABLE_COLUMNS
        }

    def row_count(self, table: str) -> int:
        return sum(1 for row in self.tables[table] if row)


class InMemoryRowStore(RowStore):
    """RowStore over an InMemoryDatabase."""

    def __init__(self, session: AuthSession, database: Optional[InMemoryDatabase] = None):
        super().__init__(session)
        self.database = database or InMemoryDatabase()

    def _load(self, table: str) -> list[dict[str, str]]:
        return deepcopy(self.database.tables[table])

    def _append(self, table: str, rows: list[dict[str, str]]) -> None:
        self.database.tables[table].extend(deepcopy(rows))

    def _write(self, table: str, position: int, row: dict[str, str]) -> None:
        self.database.tables[table][position] = dict(row)

    def _remove(self, table: str, position: int) -> None:
        del self.database.tables[table][position]
