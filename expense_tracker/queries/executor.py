"""
Dashboard Summary Builder

DESIGN DECISION: Numbers shown to the user are computed from ONE
fetch of the owner's records. The builder reads from storage once,
then hands the records to the pure aggregation functions, so every
figure on a screen comes from the same snapshot.

Storage errors are not caught here; the caller decides how to tell
the user.
"""

from datetime import date
from typing import Optional
from uuid import UUID

from expense_tracker.config import AppSettings
from expense_tracker.models.expense import Expense, MonthlyBudget, month_key
from expense_tracker.models.summary import DashboardSummary
from expense_tracker.queries import aggregation
from expense_tracker.queries.filters import recent_expenses
from expense_tracker.services.storage import ExpenseStorageInterface


class SummaryBuilder:
    """
    Builds dashboard summaries for an owner.

    The reference date is injectable so summaries are reproducible.
    """

    def __init__(
        self,
        storage: ExpenseStorageInterface,
        settings: Optional[AppSettings] = None,
    ):
        self._storage = storage
        self._settings = settings or AppSettings()

    async def build(self, owner_id: UUID, now: Optional[date] = None) -> DashboardSummary:
        """Fetch the owner's records and summarise them as of ``now``."""
        now = aggregation.reference_day(now)
        expenses = await self._storage.list_expenses(owner_id)
        budget = await self._storage.get_budget_for_month(owner_id, month_key(now))
        return self.summarize(expenses, budget, now)

    def summarize(
        self,
        expenses: list[Expense],
        budget: Optional[MonthlyBudget],
        now: date,
    ) -> DashboardSummary:
        """Summarise already-fetched records. Pure."""
        now = aggregation.reference_day(now)
        current = aggregation.current_period(expenses, now)
        previous = aggregation.prior_period(expenses, now)
        current_total = aggregation.total(current)
        previous_total = aggregation.total(previous)

        return DashboardSummary(
            as_of=now,
            current_total=current_total,
            previous_total=previous_total,
            percent_change=aggregation.percent_change(current_total, previous_total),
            category_totals=aggregation.category_totals(current),
            category_breakdown=aggregation.category_breakdown(current),
            top_category=aggregation.top_category(current),
            budget=aggregation.budget_status(
                current_total,
                budget,
                self._settings.budget_warning_percent,
            ),
            monthly_trend=aggregation.monthly_totals(
                expenses,
                self._settings.trend_months,
                now,
            ),
            average_monthly_spend=aggregation.average_monthly_spend(expenses, now),
            currency_symbol=self._settings.currency_symbol,
            recent_expenses=recent_expenses(
                expenses,
                self._settings.recent_expenses_limit,
            ),
        )
