"""
Owner-Scoped Row Store

DESIGN DECISION: Ownership is enforced by the store, not by callers.
A RowStore is opened for one signed-in session and behaves like a
table protected by row-level security:

- rows of other owners are invisible to select()
- inserting a row for another owner is refused
- updating or deleting another owner's row is refused
- unique keys (e.g. one budget per owner and month) are enforced

Concrete backends only provide four primitives over raw rows
(load, append, write, remove). The rules above live here once, so
every backend enforces them identically.

Rows are ``dict[str, str]``; see rows.py for the shapes.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional, Sequence
from uuid import uuid4

import structlog

from expense_tracker.models.session import AuthSession
from expense_tracker.services.storage.interface import (
    AccessDeniedError,
    DuplicateError,
    NotFoundError,
    StorageError,
)
from expense_tracker.services.storage.rows import (
    IMMUTABLE_COLUMNS,
    TABLE_COLUMNS,
    TABLE_UNIQUE_KEYS,
)


logger = structlog.get_logger(__name__)


class RowStore(ABC):
    """
    Remote row store scoped to one authenticated owner.

    All public operations are coroutines: they model request/response
    calls to a remote service.
    """

    def __init__(self, session: AuthSession):
        self._session = session

    @property
    def owner_id(self) -> str:
        return str(self._session.owner_id)

    # -------------------------------------------------------------------------
    # Backend primitives
    # -------------------------------------------------------------------------

    @abstractmethod
    def _load(self, table: str) -> list[dict[str, str]]:
        """
        Return every row of ``table`` (all owners).

        The list index is the row's position for _write/_remove.
        Blank rows are returned as empty dicts so positions stay stable.
        """

    @abstractmethod
    def _append(self, table: str, rows: list[dict[str, str]]) -> None:
        """Append complete rows to ``table``."""

    @abstractmethod
    def _write(self, table: str, position: int, row: dict[str, str]) -> None:
        """Overwrite the row at ``position``."""

    @abstractmethod
    def _remove(self, table: str, position: int) -> None:
        """Delete the row at ``position``."""

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    async def select(
        self,
        table: str,
        filters: Optional[dict[str, str]] = None,
        order_by: Sequence[str] = (),
        descending: bool = False,
    ) -> list[dict[str, str]]:
        """Visible rows matching all ``filters`` (column == value)."""
        filters = filters or {}
        rows = [
            dict(row)
            for row in self._rows(table)
            if self._visible(row)
            and all(row.get(column) == value for column, value in filters.items())
        ]
        if order_by:
            rows.sort(
                key=lambda r: tuple(r.get(column, "") for column in order_by),
                reverse=descending,
            )
        return rows

    async def insert(
        self,
        table: str,
        rows: list[dict[str, str]],
        ignore_duplicates: bool = False,
    ) -> list[dict[str, str]]:
        """
        Insert rows as one all-or-nothing batch.

        Args:
            ignore_duplicates: Skip rows that conflict with a unique key
                instead of failing the whole batch.

        Returns:
            The rows actually inserted, with id and created_at filled in
        """
        existing = self._rows(table)
        prepared: list[dict[str, str]] = []

        for row in rows:
            self._check_owner(table, row)
            complete = self._complete(table, row)
            conflict = self._find_conflict(table, complete, existing + prepared)
            if conflict:
                if ignore_duplicates:
                    logger.debug(
                        "insert_conflict_skipped",
                        table=table,
                        key=conflict,
                    )
                    continue
                raise DuplicateError(
                    f"Duplicate key {conflict} in {table}"
                )
            prepared.append(complete)

        if prepared:
            try:
                self._append(table, prepared)
            except StorageError:
                raise
            except Exception as e:
                raise StorageError(f"Failed to insert into {table}: {e}") from e

        return [dict(row) for row in prepared]

    async def update(
        self,
        table: str,
        row_id: str,
        values: dict[str, str],
    ) -> dict[str, str]:
        """Update columns of one row and return the stored row."""
        for column in values:
            if column in IMMUTABLE_COLUMNS:
                raise StorageError(f"Column {column} of {table} cannot be updated")
            self._check_column(table, column)

        rows = self._rows(table)
        position = self._position_of(rows, row_id)
        if position is None:
            raise NotFoundError(f"{table} row not found: {row_id}")
        if not self._visible(rows[position]):
            raise AccessDeniedError(f"{table} row {row_id} belongs to another owner")

        merged = {**rows[position], **values}
        others = rows[:position] + rows[position + 1:]
        conflict = self._find_conflict(table, merged, others)
        if conflict:
            raise DuplicateError(f"Duplicate key {conflict} in {table}")

        self._safe_write(table, position, merged)
        return dict(merged)

    async def delete(self, table: str, row_id: str) -> None:
        """Delete one row. Deleting a row that is already gone succeeds."""
        rows = self._rows(table)
        position = self._position_of(rows, row_id)
        if position is None:
            return
        if not self._visible(rows[position]):
            raise AccessDeniedError(f"{table} row {row_id} belongs to another owner")

        try:
            self._remove(table, position)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete from {table}: {e}") from e

    async def upsert(
        self,
        table: str,
        row: dict[str, str],
        on_conflict: Sequence[str],
    ) -> dict[str, str]:
        """
        Insert ``row`` or overwrite the row that matches it on the
        ``on_conflict`` columns.

        Identity columns of an existing row are preserved.
        """
        self._check_owner(table, row)
        rows = self._rows(table)

        for position, current in enumerate(rows):
            if current and all(current.get(c) == row.get(c) for c in on_conflict):
                if not self._visible(current):
                    raise AccessDeniedError(
                        f"{table} row {current.get('id')} belongs to another owner"
                    )
                merged = dict(current)
                for column, value in row.items():
                    self._check_column(table, column)
                    if column not in IMMUTABLE_COLUMNS:
                        merged[column] = value
                self._safe_write(table, position, merged)
                return dict(merged)

        inserted = await self.insert(table, [row])
        return inserted[0]

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _rows(self, table: str) -> list[dict[str, str]]:
        if table not in TABLE_COLUMNS:
            raise StorageError(f"Unknown table: {table}")
        try:
            return self._load(table)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read {table}: {e}") from e

    def _safe_write(self, table: str, position: int, row: dict[str, str]) -> None:
        try:
            self._write(table, position, row)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update {table}: {e}") from e

    def _visible(self, row: dict[str, str]) -> bool:
        return bool(row) and row.get("owner_id") == self.owner_id

    def _check_owner(self, table: str, row: dict[str, str]) -> None:
        if row.get("owner_id") != self.owner_id:
            raise AccessDeniedError(
                f"New row violates row-level security policy for table {table}"
            )

    def _check_column(self, table: str, column: str) -> None:
        if column not in TABLE_COLUMNS[table]:
            raise StorageError(f"Column {column} does not exist on {table}")

    def _complete(self, table: str, row: dict[str, str]) -> dict[str, str]:
        """Fill defaults the way the store's column defaults would."""
        for column in row:
            self._check_column(table, column)
        complete = {column: row.get(column, "") for column in TABLE_COLUMNS[table]}
        if not complete["id"]:
            complete["id"] = str(uuid4())
        if not complete["created_at"]:
            complete["created_at"] = datetime.now(timezone.utc).isoformat()
        return complete

    @staticmethod
    def _position_of(rows: list[dict[str, str]], row_id: str) -> Optional[int]:
        for position, row in enumerate(rows):
            if row and row.get("id") == row_id:
                return position
        return None

    @staticmethod
    def _find_conflict(
        table: str,
        row: dict[str, str],
        others: list[dict[str, str]],
    ) -> Optional[dict[str, str]]:
        """Return the first unique key of ``row`` already taken in ``others``."""
        for key in TABLE_UNIQUE_KEYS[table]:
            values = {column: row.get(column, "") for column in key}
            for other in others:
                if other and all(other.get(c) == v for c, v in values.items()):
                    return values
        return None
