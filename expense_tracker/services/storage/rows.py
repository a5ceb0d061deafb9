"""
Row Mapping

Translates between domain records and the persisted row shape.

Rows are flat ``dict[str, str]``: every cell is a string, amounts are
decimal strings, dates and timestamps are ISO 8601. This matches what
a spreadsheet cell (or a numeric column fetched as JSON) gives back,
so parsing always goes through the domain models.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any
from uuid import UUID

from expense_tracker.models.expense import (
    CachedBudget,
    CachedExpense,
    Expense,
    ExpenseFields,
    MonthlyBudget,
)


EXPENSES_TABLE = "expenses"
BUDGETS_TABLE = "monthly_budgets"

EXPENSE_COLUMNS = [
    "id",
    "owner_id",
    "date",
    "category",
    "description",
    "amount",
    "payment_method",
    "tag",
    "created_at",
]

BUDGET_COLUMNS = [
    "id",
    "owner_id",
    "month",
    "amount",
    "created_at",
]

TABLE_COLUMNS = {
    EXPENSES_TABLE: EXPENSE_COLUMNS,
    BUDGETS_TABLE: BUDGET_COLUMNS,
}

# Unique keys per table (the store rejects or skips conflicting inserts)
TABLE_UNIQUE_KEYS = {
    EXPENSES_TABLE: [("id",)],
    BUDGETS_TABLE: [("id",), ("owner_id", "month")],
}

# Columns that are assigned on insert and never change
IMMUTABLE_COLUMNS = ("id", "owner_id", "created_at")


def _cell(value: Any) -> str:
    """Render one domain value as a cell string."""
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def fields_to_row(fields: dict) -> dict[str, str]:
    """Map a (possibly partial) dict of expense fields to row cells."""
    return {name: _cell(value) for name, value in fields.items()}


def expense_fields_to_row(owner_id: UUID, fields: ExpenseFields) -> dict[str, str]:
    """Row for a new expense; the store fills in id and created_at."""
    row = fields_to_row(fields.model_dump(include=set(ExpenseFields.model_fields)))
    row["owner_id"] = str(owner_id)
    return row


def expense_to_row(expense: Expense) -> dict[str, str]:
    return {name: _cell(getattr(expense, name)) for name in EXPENSE_COLUMNS}


def cached_expense_to_row(owner_id: UUID, record: CachedExpense) -> dict[str, str]:
    """
    Row for an expense imported from a device.

    The device id is kept as the primary key. A missing creation
    time is left empty so the store stamps it.
    """
    row = expense_fields_to_row(owner_id, record)
    row["id"] = str(record.id)
    if record.created_at is not None:
        row["created_at"] = record.created_at.isoformat()
    return row


def row_to_expense(row: dict[str, str]) -> Expense:
    """
    Parse an expense row.

    Cells are handed to the model as strings so every malformed cell
    surfaces as a pydantic.ValidationError.
    """
    return Expense(
        id=row["id"],
        owner_id=row["owner_id"],
        date=row["date"],
        category=row["category"],
        description=row["description"],
        amount=row["amount"],
        payment_method=row["payment_method"],
        tag=row.get("tag") or None,
        created_at=row["created_at"],
    )


def budget_to_row(budget: MonthlyBudget) -> dict[str, str]:
    return {name: _cell(getattr(budget, name)) for name in BUDGET_COLUMNS}


def cached_budget_to_row(owner_id: UUID, record: CachedBudget) -> dict[str, str]:
    return {
        "owner_id": str(owner_id),
        "month": record.month,
        "amount": _cell(record.amount),
    }


def row_to_budget(row: dict[str, str]) -> MonthlyBudget:
    return MonthlyBudget(
        id=row.get("id") or None,
        owner_id=row["owner_id"],
        month=row["month"],
        amount=row["amount"],
        created_at=row.get("created_at") or None,
    )
