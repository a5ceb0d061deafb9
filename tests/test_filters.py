"""Tests for the expense history filters."""

import pytest
from datetime import date

from pydantic import ValidationError

from expense_tracker.models.expense import Category, PaymentMethod
from expense_tracker.queries.filters import (
    ExpenseFilter,
    available_months,
    filter_expenses,
    recent_expenses,
)

from tests.conftest import make_expense


@pytest.fixture
def history():
    return [
        make_expense(120, Category.FOOD, date(2026, 10, 3), description="Groceries", tag="weekly"),
        make_expense(900, Category.RENT, date(2026, 10, 1), description="Rent October",
                     payment_method=PaymentMethod.BANK),
        make_expense(45, Category.TRAVEL, date(2026, 9, 20), description="Metro card top-up",
                     payment_method=PaymentMethod.CARD),
        make_expense(300, Category.FOOD, date(2026, 9, 12), description="Dinner out"),
    ]


class TestFilterExpenses:
    """Tests for search, filter and sort."""

    def test_no_criteria_sorts_newest_first(self, history):
        result = filter_expenses(history)
        assert [e.date for e in result] == sorted((e.date for e in history), reverse=True)

    def test_search_matches_description_case_insensitive(self, history):
        result = filter_expenses(history, ExpenseFilter(search="RENT"))
        assert [e.description for e in result] == ["Rent October"]

    def test_search_matches_tag(self, history):
        result = filter_expenses(history, ExpenseFilter(search="week"))
        assert [e.description for e in result] == ["Groceries"]

    def test_filter_by_category(self, history):
        result = filter_expenses(history, ExpenseFilter(category=Category.FOOD))
        assert {e.description for e in result} == {"Groceries", "Dinner out"}

    def test_filter_by_payment_method(self, history):
        result = filter_expenses(history, ExpenseFilter(payment_method="card"))
        assert [e.description for e in result] == ["Metro card top-up"]

    def test_filter_by_month(self, history):
        result = filter_expenses(history, ExpenseFilter(month="2026-09"))
        assert {e.description for e in result} == {"Metro card top-up", "Dinner out"}

    def test_combined_criteria(self, history):
        criteria = ExpenseFilter(category=Category.FOOD, month="2026-10")
        assert [e.description for e in filter_expenses(history, criteria)] == ["Groceries"]

    def test_sort_by_amount_ascending(self, history):
        criteria = ExpenseFilter(sort_by="amount", descending=False)
        result = filter_expenses(history, criteria)
        assert [e.amount for e in result] == sorted(e.amount for e in history)

    def test_invalid_month_rejected(self):
        with pytest.raises(ValidationError):
            ExpenseFilter(month="Sept")

    def test_invalid_sort_rejected(self):
        with pytest.raises(ValidationError):
            ExpenseFilter(sort_by="category")


class TestHistoryHelpers:

    def test_available_months(self, history):
        assert available_months(history) == ["2026-10", "2026-09"]

    def test_recent_expenses(self, history):
        recent = recent_expenses(history, limit=2)
        assert [e.date for e in recent] == [date(2026, 10, 3), date(2026, 10, 1)]

    def test_recent_expenses_fewer_than_limit(self, history):
        assert len(recent_expenses(history, limit=10)) == 4
