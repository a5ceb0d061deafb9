"""
Remote Expense Storage

The adapter between domain records and the owner-scoped row store.

It validates every write BEFORE it reaches the store, converts
records to rows and rows back to records, and passes store errors
through untouched. It does not check ownership itself; the
RowStore it is given does that.
"""

from collections.abc import Mapping
from decimal import Decimal
from typing import Optional, Union
from uuid import UUID

import structlog

from expense_tracker.models.expense import (
    CachedBudget,
    CachedExpense,
    Expense,
    ExpenseFields,
    ExpenseUpdate,
    MonthlyBudget,
    is_month_key,
)
from expense_tracker.services.storage.backend import RowStore
from expense_tracker.services.storage.interface import ExpenseStorageInterface
from expense_tracker.services.storage.rows import (
    BUDGETS_TABLE,
    EXPENSES_TABLE,
    budget_to_row,
    cached_budget_to_row,
    cached_expense_to_row,
    expense_fields_to_row,
    fields_to_row,
    row_to_budget,
    row_to_expense,
)


logger = structlog.get_logger(__name__)


class RemoteExpenseStorage(ExpenseStorageInterface):
    """ExpenseStorageInterface over a RowStore."""

    def __init__(self, store: RowStore):
        self._store = store

    async def list_expenses(self, owner_id: UUID) -> list[Expense]:
        rows = await self._store.select(
            EXPENSES_TABLE,
            {"owner_id": str(owner_id)},
            order_by=("date", "created_at"),
            descending=True,
        )

        expenses = []
        for row in rows:
            try:
                expenses.append(row_to_expense(row))
            except (ValueError, KeyError) as e:
                # Skip malformed rows (e.g. edited by hand in the sheet)
                logger.warning("malformed_expense_row", row_id=row.get("id"), error=str(e))
        return expenses

    async def create_expense(
        self,
        owner_id: UUID,
        fields: Union[ExpenseFields, Mapping],
    ) -> Expense:
        if not isinstance(fields, ExpenseFields):
            fields = ExpenseFields.model_validate(fields)

        inserted = await self._store.insert(
            EXPENSES_TABLE,
            [expense_fields_to_row(owner_id, fields)],
        )
        return row_to_expense(inserted[0])

    async def update_expense(
        self,
        expense_id: UUID,
        changes: Union[ExpenseUpdate, Mapping],
    ) -> Expense:
        if not isinstance(changes, ExpenseUpdate):
            changes = ExpenseUpdate.model_validate(changes)

        updated = await self._store.update(
            EXPENSES_TABLE,
            str(expense_id),
            fields_to_row(changes.changes()),
        )
        return row_to_expense(updated)

    async def delete_expense(self, expense_id: UUID) -> None:
        await self._store.delete(EXPENSES_TABLE, str(expense_id))

    async def list_budgets(self, owner_id: UUID) -> list[MonthlyBudget]:
        rows = await self._store.select(
            BUDGETS_TABLE,
            {"owner_id": str(owner_id)},
            order_by=("month",),
            descending=True,
        )
        return [row_to_budget(row) for row in rows]

    async def get_budget_for_month(
        self,
        owner_id: UUID,
        month: str,
    ) -> Optional[MonthlyBudget]:
        if not is_month_key(month):
            raise ValueError(f"Invalid month key: {month!r} (expected YYYY-MM)")

        rows = await self._store.select(
            BUDGETS_TABLE,
            {"owner_id": str(owner_id), "month": month},
        )
        if not rows:
            return None
        return row_to_budget(rows[0])

    async def save_budget(
        self,
        owner_id: UUID,
        month: str,
        amount: Decimal,
    ) -> MonthlyBudget:
        budget = MonthlyBudget(owner_id=owner_id, month=month, amount=amount)
        row = {k: v for k, v in budget_to_row(budget).items() if v}

        stored = await self._store.upsert(
            BUDGETS_TABLE,
            row,
            on_conflict=("owner_id", "month"),
        )
        return row_to_budget(stored)

    async def import_expenses(
        self,
        owner_id: UUID,
        records: list[CachedExpense],
    ) -> int:
        if not records:
            return 0
        inserted = await self._store.insert(
            EXPENSES_TABLE,
            [cached_expense_to_row(owner_id, record) for record in records],
            ignore_duplicates=True,
        )
        return len(inserted)

    async def import_budgets(
        self,
        owner_id: UUID,
        records: list[CachedBudget],
    ) -> int:
        if not records:
            return 0
        inserted = await self._store.insert(
            BUDGETS_TABLE,
            [cached_budget_to_row(owner_id, record) for record in records],
            ignore_duplicates=True,
        )
        return len(inserted)
