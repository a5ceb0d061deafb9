"""Tests for optimistic updates and the application flows."""

import asyncio
from datetime import date, datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from expense_tracker.audit import AuditLogger
from expense_tracker.config import AppSettings
from expense_tracker.models.audit import AuditEventType
from expense_tracker.models.expense import Category
from expense_tracker.models.migration import MigrationState
from expense_tracker.models.summary import BudgetLevel
from expense_tracker.orchestrator import (
    ExpenseFlow,
    ExpenseListView,
    SessionFlow,
    create_app_components,
)
from expense_tracker.services.local_cache import InMemoryLocalCache
from expense_tracker.services.storage import (
    NotFoundError,
    RemoteExpenseStorage,
    StorageError,
)
from expense_tracker.services.storage.rows import EXPENSES_TABLE

from tests.conftest import OWNER_A, TODAY


def fields(**overrides) -> dict:
    values = {
        "date": "2026-10-10",
        "category": "food",
        "description": "Lunch",
        "amount": "300",
        "payment_method": "upi",
    }
    values.update(overrides)
    return values


class UnreachableStorage(RemoteExpenseStorage):
    """Reads work, every write fails."""

    async def create_expense(self, owner_id, fields):
        raise StorageError("network down")

    async def update_expense(self, expense_id, changes):
        raise StorageError("network down")

    async def delete_expense(self, expense_id):
        raise StorageError("network down")


class FlakyReadStorage(RemoteExpenseStorage):
    """Writes work; listing fails while ``fail_reads`` is set."""

    fail_reads = False

    async def list_expenses(self, owner_id):
        if self.fail_reads:
            raise StorageError("read timeout")
        return await super().list_expenses(owner_id)


@pytest.fixture
def audit_logger():
    return AuditLogger("tests.audit")


@pytest.fixture
def flow(storage_a, audit_logger):
    return ExpenseFlow(storage_a, OWNER_A, audit_logger)


class TestExpenseListView:
    """Tests for snapshot / speculate / commit."""

    def test_speculative_state_visible_during_commit(self, storage_a):
        view = ExpenseListView(storage_a, OWNER_A)
        seen = []

        async def commit():
            seen.append(view.items)
            return "done"

        result = asyncio.run(view.apply(lambda items: items + ["pending"], commit))

        assert result == "done"
        assert seen == [["pending"]]
        # Refetched from the store afterwards
        assert view.items == []

    def test_failure_restores_snapshot(self, storage_a):
        asyncio.run(storage_a.create_expense(OWNER_A, fields()))
        view = ExpenseListView(storage_a, OWNER_A)
        before = asyncio.run(view.refresh())

        async def commit():
            raise StorageError("boom")

        with pytest.raises(StorageError):
            asyncio.run(view.apply(lambda items: [], commit))
        assert view.items == before


class TestExpenseFlow:
    """Tests for expense changes through the flow."""

    def test_add_expense_refreshes_view(self, flow, audit_logger):
        created = asyncio.run(flow.add_expense(fields()))

        assert [e.id for e in flow.view.items] == [created.id]
        assert audit_logger.events[-1].event_type == AuditEventType.EXPENSE_CREATED

    def test_add_invalid_expense(self, flow):
        with pytest.raises(ValidationError):
            asyncio.run(flow.add_expense(fields(amount="0")))
        assert flow.view.items == []

    def test_edit_expense(self, flow, audit_logger):
        created = asyncio.run(flow.add_expense(fields()))
        updated = asyncio.run(flow.edit_expense(created.id, {"category": "travel"}))

        assert updated.category == Category.TRAVEL
        assert flow.view.items[0].category == Category.TRAVEL
        assert audit_logger.events[-1].details["fields"] == ["category"]

    def test_edit_missing_expense_rolls_back(self, flow):
        asyncio.run(flow.add_expense(fields()))
        before = flow.view.items

        with pytest.raises(NotFoundError):
            asyncio.run(flow.edit_expense(
                "00000000-0000-4000-8000-000000000000",
                {"amount": "1"},
            ))
        assert flow.view.items == before

    def test_remove_expense(self, flow):
        created = asyncio.run(flow.add_expense(fields()))
        asyncio.run(flow.remove_expense(created.id))
        assert flow.view.items == []

    def test_failed_delete_restores_item(self, store_a, audit_logger):
        """A delete the store rejects puts the expense back and is audited."""
        setup = RemoteExpenseStorage(store_a)
        created = asyncio.run(setup.create_expense(OWNER_A, fields()))

        flow = ExpenseFlow(UnreachableStorage(store_a), OWNER_A, audit_logger)
        asyncio.run(flow.load())

        with pytest.raises(StorageError):
            asyncio.run(flow.remove_expense(created.id))

        assert [e.id for e in flow.view.items] == [created.id]
        event_types = [e.event_type for e in audit_logger.events]
        assert event_types[-2:] == [
            AuditEventType.OPTIMISTIC_UPDATE_ROLLED_BACK,
            AuditEventType.SAVE_FAILED,
        ]

    def test_failed_create_leaves_view_unchanged(self, store_a):
        flow = ExpenseFlow(UnreachableStorage(store_a), OWNER_A)
        with pytest.raises(StorageError):
            asyncio.run(flow.add_expense(fields()))
        assert flow.view.items == []

    def test_set_budget(self, flow, audit_logger):
        budget = asyncio.run(flow.set_budget("2026-10", Decimal("1000")))
        assert budget.amount == Decimal("1000")
        assert audit_logger.events[-1].event_type == AuditEventType.BUDGET_SAVED


class TestRefetchFailure:
    """A stored change whose refetch fails is still a successful change."""

    def test_add_is_not_reported_as_failed(self, store_a, database, audit_logger):
        storage = FlakyReadStorage(store_a)
        storage.fail_reads = True
        flow = ExpenseFlow(storage, OWNER_A, audit_logger)

        created = asyncio.run(flow.add_expense(fields()))

        assert database.row_count(EXPENSES_TABLE) == 1
        assert [e.id for e in flow.view.items] == [created.id]
        event_types = [e.event_type for e in audit_logger.events]
        assert event_types == [AuditEventType.EXPENSE_CREATED]

    def test_retry_not_needed_so_no_duplicate(self, store_a, database):
        storage = FlakyReadStorage(store_a)
        storage.fail_reads = True
        flow = ExpenseFlow(storage, OWNER_A)

        asyncio.run(flow.add_expense(fields()))
        storage.fail_reads = False
        asyncio.run(flow.load())

        assert len(flow.view.items) == 1
        assert database.row_count(EXPENSES_TABLE) == 1

    def test_edit_keeps_stored_version(self, store_a, audit_logger):
        storage = FlakyReadStorage(store_a)
        flow = ExpenseFlow(storage, OWNER_A, audit_logger)
        created = asyncio.run(flow.add_expense(fields()))

        storage.fail_reads = True
        updated = asyncio.run(flow.edit_expense(created.id, {"amount": "75"}))

        assert updated.amount == Decimal("75")
        assert flow.view.items[0].amount == Decimal("75")
        assert audit_logger.events[-1].event_type == AuditEventType.EXPENSE_UPDATED

    def test_remove_keeps_item_removed(self, store_a, database, audit_logger):
        storage = FlakyReadStorage(store_a)
        flow = ExpenseFlow(storage, OWNER_A, audit_logger)
        created = asyncio.run(flow.add_expense(fields()))

        storage.fail_reads = True
        asyncio.run(flow.remove_expense(created.id))

        assert flow.view.items == []
        assert database.row_count(EXPENSES_TABLE) == 0
        assert audit_logger.events[-1].event_type == AuditEventType.EXPENSE_DELETED


class TestSummary:
    """Tests for the dashboard summary."""

    def test_summary(self, flow):
        asyncio.run(flow.add_expense(fields(amount="600")))
        asyncio.run(flow.add_expense(fields(amount="300", category="travel")))
        asyncio.run(flow.add_expense(fields(date="2026-09-05", amount="450")))
        asyncio.run(flow.set_budget("2026-10", Decimal("1000")))

        summary = asyncio.run(flow.summary(TODAY))

        assert summary.as_of == TODAY
        assert summary.current_total == Decimal("900")
        assert summary.previous_total == Decimal("450")
        assert summary.percent_change == pytest.approx(100.0)
        assert summary.top_category.category == Category.FOOD
        assert summary.budget.level == BudgetLevel.WARNING
        assert summary.budget.remaining == Decimal("100")
        assert len(summary.monthly_trend) == 12
        assert summary.average_monthly_spend == Decimal("675")
        assert len(summary.recent_expenses) == 3

    def test_summary_without_data(self, flow):
        summary = asyncio.run(flow.summary(date(2026, 1, 15)))

        assert summary.current_total == Decimal("0")
        assert summary.percent_change == 0.0
        assert summary.top_category is None
        assert summary.budget.level == BudgetLevel.UNSET
        assert summary.category_breakdown == []

    def test_summary_accepts_datetime(self, flow):
        asyncio.run(flow.add_expense(fields(amount="600")))

        summary = asyncio.run(flow.summary(datetime(2026, 10, 16, 21, 45)))

        assert summary.as_of == TODAY
        assert summary.current_total == Decimal("600")

    def test_currency_symbol_from_settings(self, storage_a):
        flow = ExpenseFlow(storage_a, OWNER_A, settings=AppSettings(currency_symbol="$"))
        assert asyncio.run(flow.summary(TODAY)).currency_symbol == "$"

    def test_default_currency_symbol(self, flow):
        assert asyncio.run(flow.summary(TODAY)).currency_symbol == "₹"


class TestSessionFlow:

    def test_start_runs_migration_check(self, session_a, storage_a):
        cache = InMemoryLocalCache(budgets=[{"month": "2026-09", "amount": 100}])
        components = create_app_components(session_a, local_cache=cache, storage=storage_a)

        session_flow = components["session_flow"]
        assert isinstance(session_flow, SessionFlow)
        assert session_flow.start(session_a) == MigrationState.PENDING
        assert components["migration"].state == MigrationState.PENDING

    def test_components_share_storage(self, session_a, storage_a):
        components = create_app_components(
            session_a,
            local_cache=InMemoryLocalCache(),
            storage=storage_a,
        )
        created = asyncio.run(components["expense_flow"].add_expense(fields()))
        assert asyncio.run(storage_a.list_expenses(OWNER_A))[0].id == created.id
