"""Aggregation, filtering and summary queries over expense records."""

from expense_tracker.queries.aggregation import (
    average_monthly_spend,
    budget_status,
    category_breakdown,
    category_totals,
    current_period,
    end_of_month,
    monthly_totals,
    percent_change,
    prior_period,
    reference_day,
    shift_months,
    start_of_month,
    top_category,
    total,
)
from expense_tracker.queries.executor import SummaryBuilder
from expense_tracker.queries.filters import (
    ExpenseFilter,
    available_months,
    filter_expenses,
    recent_expenses,
)

__all__ = [
    "ExpenseFilter",
    "SummaryBuilder",
    "available_months",
    "average_monthly_spend",
    "budget_status",
    "category_breakdown",
    "category_totals",
    "current_period",
    "end_of_month",
    "filter_expenses",
    "monthly_totals",
    "percent_change",
    "prior_period",
    "reference_day",
    "recent_expenses",
    "shift_months",
    "start_of_month",
    "top_category",
    "total",
]
