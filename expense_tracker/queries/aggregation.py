"""
Spending Aggregation Engine

DESIGN DECISION: Every function here is PURE.
Given the same records and the same reference date they return the
same numbers, touch no storage and never raise on well-formed input.
Malformed records are rejected when they are built (see models),
not here.

All month arithmetic is calendar based: "last month" of 15 January
is December of the previous year, not the 30 days before.
"""

import calendar
from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from expense_tracker.models.expense import Category, Expense, MonthlyBudget, month_key
from expense_tracker.models.summary import (
    BudgetLevel,
    BudgetStatus,
    CategoryShare,
    CategoryTotal,
    MonthlyTotal,
)


ZERO = Decimal("0")


# =============================================================================
# CALENDAR HELPERS
# =============================================================================

def reference_day(now: Optional[date] = None) -> date:
    """
    The calendar day a computation is anchored to.

    Accepts a date or a datetime (its local calendar day); defaults
    to today.
    """
    if now is None:
        return date.today()
    if isinstance(now, datetime):
        return now.date()
    return now


def start_of_month(day: date) -> date:
    return day.replace(day=1)


def end_of_month(day: date) -> date:
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=last)


def shift_months(day: date, months: int) -> date:
    """
    Move ``day`` by a number of calendar months.

    The day of month is clamped to the target month's length
    (31 March - 1 month = 28/29 February).
    """
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last))


def _in_month(expenses: Iterable[Expense], anchor: date) -> list[Expense]:
    start = start_of_month(anchor)
    end = end_of_month(anchor)
    return [e for e in expenses if start <= e.date <= end]


# =============================================================================
# PERIOD SLICES
# =============================================================================

def current_period(
    expenses: Iterable[Expense],
    now: Optional[date] = None,
) -> list[Expense]:
    """Expenses dated within the month containing ``now`` (inclusive)."""
    return _in_month(expenses, reference_day(now))


def prior_period(
    expenses: Iterable[Expense],
    now: Optional[date] = None,
) -> list[Expense]:
    """Expenses dated within the calendar month before ``now``'s month."""
    return _in_month(expenses, shift_months(reference_day(now), -1))


# =============================================================================
# SUMS AND CHANGE
# =============================================================================

def total(expenses: Iterable[Expense]) -> Decimal:
    """Sum of amounts; zero for no expenses."""
    return sum((e.amount for e in expenses), ZERO)


def percent_change(current: Decimal, previous: Decimal) -> float:
    """
    Change from ``previous`` to ``current`` in percent.

    With no previous spend there is no base to compare against:
    any current spend reports as +100, no spend as 0.
    """
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return float((Decimal(current) - Decimal(previous)) / Decimal(previous) * 100)


# =============================================================================
# CATEGORIES
# =============================================================================

def category_totals(expenses: Iterable[Expense]) -> dict[Category, Decimal]:
    """
    Spend per category.

    Always contains every category, in declaration order, with zero
    for categories that have no expenses.
    """
    totals = {category: ZERO for category in Category}
    for expense in expenses:
        totals[expense.category] += expense.amount
    return totals


def top_category(expenses: Iterable[Expense]) -> Optional[CategoryTotal]:
    """
    The category with the largest spend.

    Returns None when nothing was spent. On a tie the category that
    comes first in declaration order keeps the top spot.
    """
    best: Optional[Category] = None
    best_amount = ZERO
    for category, amount in category_totals(expenses).items():
        if amount > best_amount:
            best, best_amount = category, amount
    if best is None:
        return None
    return CategoryTotal(category=best, amount=best_amount)


def category_breakdown(expenses: Iterable[Expense]) -> list[CategoryShare]:
    """Categories with spend, largest first, with their share of the total."""
    totals = category_totals(expenses)
    overall = sum(totals.values(), ZERO)
    if overall == 0:
        return []
    shares = [
        CategoryShare(
            category=category,
            amount=amount,
            percent=float(amount / overall * 100),
        )
        for category, amount in totals.items()
        if amount > 0
    ]
    # sort is stable, so equal amounts keep declaration order
    shares.sort(key=lambda s: s.amount, reverse=True)
    return shares


# =============================================================================
# TRENDS
# =============================================================================

def monthly_totals(
    expenses: Iterable[Expense],
    months_back: int = 12,
    now: Optional[date] = None,
) -> list[MonthlyTotal]:
    """
    Spend per calendar month for the last ``months_back`` months.

    Oldest first, ending with the month containing ``now``. Months
    without expenses are included with a zero total, so the length is
    always ``months_back``.
    """
    if months_back < 0:
        raise ValueError("months_back must not be negative")

    anchor = reference_day(now)
    by_month: dict[str, Decimal] = {}
    for expense in expenses:
        key = month_key(expense.date)
        by_month[key] = by_month.get(key, ZERO) + expense.amount

    result = []
    for offset in range(months_back - 1, -1, -1):
        month_start = start_of_month(shift_months(anchor, -offset))
        key = month_key(month_start)
        result.append(MonthlyTotal(
            month=key,
            label=month_start.strftime("%b %Y"),
            total=by_month.get(key, ZERO),
        ))
    return result


def average_monthly_spend(
    expenses: Iterable[Expense],
    now: Optional[date] = None,
) -> Decimal:
    """
    Mean spend of the months in the last 12 that have any spend.

    Empty months are left out so a new user's average is not diluted.
    """
    active = [m.total for m in monthly_totals(expenses, 12, now) if m.total > 0]
    if not active:
        return ZERO
    return sum(active, ZERO) / len(active)


# =============================================================================
# BUDGET
# =============================================================================

def budget_status(
    spent: Decimal,
    budget: Optional[MonthlyBudget],
    warning_percent: float = 80.0,
) -> BudgetStatus:
    """How much of the month's budget ``spent`` uses."""
    if budget is None:
        return BudgetStatus(spent=spent)

    percent = float(spent / budget.amount * 100)
    if percent > 100:
        level = BudgetLevel.EXCEEDED
    elif percent > warning_percent:
        level = BudgetLevel.WARNING
    else:
        level = BudgetLevel.OK

    return BudgetStatus(
        budget_amount=budget.amount,
        spent=spent,
        percent_used=percent,
        remaining=budget.amount - spent,
        level=level,
    )
