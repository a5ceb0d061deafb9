"""
Summary Models

Result shapes produced by the aggregation engine and the dashboard
summary builder. They carry numbers only; formatting is left to the
presentation layer.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from expense_tracker.models.expense import Category, Expense


class CategoryTotal(BaseModel):
    """The spend of a single category."""

    category: Category
    amount: Decimal


class CategoryShare(CategoryTotal):
    """A category's spend and its share of the overall total."""

    percent: float = Field(ge=0.0, le=100.0)


class MonthlyTotal(BaseModel):
    """One point of the monthly spending trend."""

    month: str = Field(..., description="Month key in YYYY-MM format")
    label: str = Field(..., description="Short label, e.g. 'Oct 2026'")
    total: Decimal


class BudgetLevel(str, Enum):
    """How close spending is to the month's budget."""
    UNSET = "unset"        # No budget saved for the month
    OK = "ok"
    WARNING = "warning"    # Above the warning threshold
    EXCEEDED = "exceeded"  # Above 100%


class BudgetStatus(BaseModel):
    """Budget usage for one month."""

    budget_amount: Optional[Decimal] = None
    spent: Decimal
    percent_used: float = 0.0
    remaining: Optional[Decimal] = None
    level: BudgetLevel = BudgetLevel.UNSET

    @property
    def has_budget(self) -> bool:
        return self.budget_amount is not None


class DashboardSummary(BaseModel):
    """
    Everything the dashboard and analytics screens display.

    Built from one fetch of the owner's expenses plus the current
    month's budget.
    """

    as_of: date
    current_total: Decimal
    previous_total: Decimal
    percent_change: float
    category_totals: dict[Category, Decimal]
    category_breakdown: list[CategoryShare] = Field(default_factory=list)
    top_category: Optional[CategoryTotal] = None
    budget: BudgetStatus
    monthly_trend: list[MonthlyTotal] = Field(default_factory=list)
    average_monthly_spend: Decimal
    currency_symbol: str = Field(default="₹", description="Symbol to show in front of amounts")
    recent_expenses: list[Expense] = Field(default_factory=list)
