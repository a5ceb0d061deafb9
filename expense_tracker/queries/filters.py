"""
Expense History Filters

Search, filter and sort for the history list. Like the aggregation
engine these are pure functions over already-fetched expenses.
"""

from collections.abc import Iterable
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from expense_tracker.models.expense import (
    MONTH_KEY_PATTERN,
    Category,
    Expense,
    PaymentMethod,
    month_key,
)


class ExpenseFilter(BaseModel):
    """
    Criteria for the history list.

    Unset criteria match everything. Sorting defaults to newest first.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    search: Optional[str] = Field(
        default=None,
        description="Case-insensitive text matched against description and tag"
    )
    category: Optional[Category] = None
    payment_method: Optional[PaymentMethod] = None
    month: Optional[str] = Field(default=None, pattern=MONTH_KEY_PATTERN)
    sort_by: Literal["date", "amount"] = "date"
    descending: bool = True


def _matches(expense: Expense, criteria: ExpenseFilter) -> bool:
    if criteria.search:
        needle = criteria.search.lower()
        in_description = needle in expense.description.lower()
        in_tag = bool(expense.tag) and needle in expense.tag.lower()
        if not (in_description or in_tag):
            return False
    if criteria.category and expense.category != criteria.category:
        return False
    if criteria.payment_method and expense.payment_method != criteria.payment_method:
        return False
    if criteria.month and month_key(expense.date) != criteria.month:
        return False
    return True


def filter_expenses(
    expenses: Iterable[Expense],
    criteria: Optional[ExpenseFilter] = None,
) -> list[Expense]:
    """Apply ``criteria`` and return the matching expenses sorted."""
    criteria = criteria or ExpenseFilter()
    matched = [e for e in expenses if _matches(e, criteria)]
    if criteria.sort_by == "amount":
        matched.sort(key=lambda e: e.amount, reverse=criteria.descending)
    else:
        matched.sort(key=lambda e: e.date, reverse=criteria.descending)
    return matched


def available_months(expenses: Iterable[Expense]) -> list[str]:
    """Distinct YYYY-MM keys that have expenses, newest first."""
    return sorted({month_key(e.date) for e in expenses}, reverse=True)


def recent_expenses(expenses: Iterable[Expense], limit: int = 5) -> list[Expense]:
    """The ``limit`` most recent expenses by date."""
    return sorted(expenses, key=lambda e: e.date, reverse=True)[:limit]
