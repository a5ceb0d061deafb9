"""
Main Orchestrator for Expense Tracker

This module ties together all the components and defines the
end-to-end flows for:
1. Session start (sign-in -> local data check -> optional import)
2. Expense changes (optimistic update -> store -> refetch or rollback)
3. Dashboard summaries

DESIGN DECISION: Optimistic updates are explicit.
The view takes a snapshot, applies the expected result right away,
then waits for the store:
- on failure the snapshot is restored and the error re-raised
- on success the view is refetched so it matches the store exactly
There are no background retries; a failed change is reported once
and the user decides whether to try again.
"""

from collections.abc import Awaitable, Callable, Mapping
from datetime import date
from decimal import Decimal
from typing import Optional, TypeVar, Union
from uuid import UUID

import structlog
from pydantic import ValidationError

from expense_tracker.audit import AuditLogger
from expense_tracker.config import get_settings, validate_all_settings
from expense_tracker.config.settings import AppSettings
from expense_tracker.migration import LocalDataMigration
from expense_tracker.models.expense import (
    Expense,
    ExpenseFields,
    ExpenseUpdate,
    MonthlyBudget,
)
from expense_tracker.models.migration import MigrationState
from expense_tracker.models.session import AuthSession
from expense_tracker.models.summary import DashboardSummary
from expense_tracker.queries import SummaryBuilder
from expense_tracker.services.local_cache import (
    JsonFileLocalCache,
    LocalCacheInterface,
)
from expense_tracker.services.storage import (
    ExpenseStorageInterface,
    GoogleSheetsRowStore,
    RemoteExpenseStorage,
    StorageError,
)


logger = structlog.get_logger(__name__)

T = TypeVar("T")


class ExpenseListView:
    """
    The owner's expense list as the UI currently shows it.

    ``items`` may briefly run ahead of the store while a change is
    in flight (see apply()).
    """

    def __init__(self, storage: ExpenseStorageInterface, owner_id: UUID):
        self._storage = storage
        self._owner_id = owner_id
        self._items: list[Expense] = []

    @property
    def items(self) -> list[Expense]:
        return list(self._items)

    async def refresh(self) -> list[Expense]:
        """Replace the view with the store's current list."""
        self._items = await self._storage.list_expenses(self._owner_id)
        return self.items

    async def apply(
        self,
        speculate: Callable[[list[Expense]], list[Expense]],
        commit: Callable[[], Awaitable[T]],
        settle: Optional[Callable[[list[Expense], T], list[Expense]]] = None,
    ) -> T:
        """
        Apply an optimistic change.

        Args:
            speculate: Returns the list as it should look after the change
            commit: Performs the change against the store
            settle: Folds the committed result into the list; used only
                when the refetch after a successful commit fails

        Raises:
            Whatever ``commit`` raised, after the snapshot was restored.
            A failed refetch is NOT raised: the change is already stored.
        """
        snapshot = list(self._items)
        self._items = speculate(list(snapshot))
        try:
            result = await commit()
        except (StorageError, ValidationError):
            self._items = snapshot
            raise

        try:
            await self.refresh()
        except StorageError as e:
            logger.warning(
                "refetch_after_commit_failed",
                owner_id=str(self._owner_id),
                error=str(e),
            )
            if settle:
                self._items = settle(self._items, result)
        return result


class ExpenseFlow:
    """
    Orchestrates changes to one owner's expenses and budgets.

    Every change goes through the optimistic view and is audited.
    """

    def __init__(
        self,
        storage: ExpenseStorageInterface,
        owner_id: UUID,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ):
        self._storage = storage
        self._owner_id = owner_id
        self._audit_logger = audit_logger
        self._summaries = SummaryBuilder(storage, settings)
        self.view = ExpenseListView(storage, owner_id)

    async def load(self) -> list[Expense]:
        return await self.view.refresh()

    async def add_expense(self, fields: Union[ExpenseFields, Mapping]) -> Expense:
        """Validate, show immediately, then persist."""
        if not isinstance(fields, ExpenseFields):
            fields = ExpenseFields.model_validate(fields)

        try:
            expense = await self.view.apply(
                speculate=lambda items: items,  # no id until the store assigns one
                commit=lambda: self._storage.create_expense(self._owner_id, fields),
                settle=lambda items, created: [created] + items,
            )
        except StorageError as e:
            self._failed("create expense", e)
            raise

        if self._audit_logger:
            self._audit_logger.log_expense_created(
                owner_id=self._owner_id,
                expense_id=expense.id,
                category=expense.category.value,
                amount=str(expense.amount),
            )
        return expense

    async def edit_expense(
        self,
        expense_id: UUID,
        changes: Union[ExpenseUpdate, Mapping],
    ) -> Expense:
        if not isinstance(changes, ExpenseUpdate):
            changes = ExpenseUpdate.model_validate(changes)
        values = changes.changes()

        def speculate(items: list[Expense]) -> list[Expense]:
            return [
                e.model_copy(update=values) if e.id == expense_id else e
                for e in items
            ]

        try:
            expense = await self.view.apply(
                speculate,
                lambda: self._storage.update_expense(expense_id, changes),
                lambda items, stored: [stored if e.id == stored.id else e for e in items],
            )
        except StorageError as e:
            self._failed("update expense", e, expense_id)
            raise

        if self._audit_logger:
            self._audit_logger.log_expense_updated(
                owner_id=self._owner_id,
                expense_id=expense_id,
                fields=sorted(values),
            )
        return expense

    async def remove_expense(self, expense_id: UUID) -> None:
        try:
            await self.view.apply(
                lambda items: [e for e in items if e.id != expense_id],
                lambda: self._storage.delete_expense(expense_id),
            )
        except StorageError as e:
            self._failed("delete expense", e, expense_id)
            raise

        if self._audit_logger:
            self._audit_logger.log_expense_deleted(self._owner_id, expense_id)

    async def set_budget(self, month: str, amount: Decimal) -> MonthlyBudget:
        try:
            budget = await self._storage.save_budget(self._owner_id, month, amount)
        except StorageError as e:
            self._failed("save budget", e)
            raise

        if self._audit_logger:
            self._audit_logger.log_budget_saved(
                self._owner_id,
                budget.month,
                str(budget.amount),
            )
        return budget

    async def summary(self, now: Optional[date] = None) -> DashboardSummary:
        return await self._summaries.build(self._owner_id, now)

    def _failed(
        self,
        operation: str,
        error: Exception,
        entity_id: Optional[UUID] = None,
    ) -> None:
        if self._audit_logger:
            self._audit_logger.log_rollback(self._owner_id, operation)
            self._audit_logger.log_save_failed(
                owner_id=self._owner_id,
                operation=operation,
                error_message=str(error),
                entity_id=entity_id,
            )


class SessionFlow:
    """
    Runs what has to happen when a user signs in on this device.

    Currently that is the local data check; the returned state tells
    the caller whether to ask the user about importing.
    """

    def __init__(self, migration: LocalDataMigration):
        self.migration = migration

    def start(self, session: AuthSession) -> MigrationState:
        return self.migration.check(session)


def create_app_components(
    session: AuthSession,
    local_cache: Optional[LocalCacheInterface] = None,
    storage: Optional[ExpenseStorageInterface] = None,
) -> dict:
    """
    Create all application components for a signed-in session.

    Defaults to the Google Sheets store and the JSON file cache
    configured in settings. Settings blocks that fail to load are
    logged; only the ones actually used will raise.
    """
    settings = get_settings()
    audit_logger = AuditLogger()

    checks = validate_all_settings()
    for name in ("google_sheets", "local_cache", "app"):
        if not checks.get(name):
            logger.warning(
                "settings_invalid",
                block=name,
                error=checks.get(f"{name}_error"),
            )

    storage = storage or RemoteExpenseStorage(GoogleSheetsRowStore(session))
    local_cache = local_cache or JsonFileLocalCache()
    migration = LocalDataMigration(local_cache, storage, audit_logger)

    return {
        "storage": storage,
        "audit_logger": audit_logger,
        "migration": migration,
        "session_flow": SessionFlow(migration),
        "expense_flow": ExpenseFlow(
            storage,
            session.owner_id,
            audit_logger,
            settings.app,
        ),
    }
