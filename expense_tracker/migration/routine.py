"""
One-Shot Local Data Migration

Moves expenses and budgets that were saved on a device before the
user signed in into the remote store, exactly once per device.

Flow:
1. check()   - session present, flag not completed, local data found
               -> PENDING (flag persisted as pending)
2. confirm() - user said yes -> MIGRATING -> import expenses, then budgets
3. success   - clear local records, flag completed -> COMPLETED
4. failure   - nothing cleared, flag untouched -> back to PENDING, raise
5. decline() - user said no -> COMPLETED, local records kept

CRITICAL: Nothing is transferred without explicit user confirmation,
and local data is only cleared after BOTH imports succeeded.

Retrying after a partial failure is safe: imports keep the device's
record ids and the store skips ids (and budget months) it already has,
so expenses imported by the failed attempt are not duplicated.
"""

from typing import Optional
from uuid import UUID

import structlog
from pydantic import ValidationError

from expense_tracker.audit import AuditLogger
from expense_tracker.models.expense import CachedBudget, CachedExpense
from expense_tracker.models.migration import (
    MigrationFlag,
    MigrationResult,
    MigrationStage,
    MigrationState,
)
from expense_tracker.models.session import AuthSession
from expense_tracker.services.local_cache import (
    LocalCacheError,
    LocalCacheInterface,
)
from expense_tracker.services.storage import ExpenseStorageInterface, StorageError


logger = structlog.get_logger(__name__)


class MigrationError(Exception):
    """
    The migration could not be completed.

    ``stage`` tells where it stopped; the underlying error is chained
    as ``__cause__``.
    """

    def __init__(self, message: str, stage: Optional[MigrationStage] = None):
        super().__init__(message)
        self.stage = stage


class LocalDataMigration:
    """
    Per-device migration of pre-sign-in records.

    The persisted flag lives in the local cache that is passed in;
    the in-memory ``state`` adds the transient states.
    """

    def __init__(
        self,
        local_cache: LocalCacheInterface,
        storage: ExpenseStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._cache = local_cache
        self._storage = storage
        self._audit_logger = audit_logger
        self._state = MigrationState.UNCHECKED
        self._owner_id: Optional[UUID] = None

    @property
    def state(self) -> MigrationState:
        return self._state

    @property
    def owner_id(self) -> Optional[UUID]:
        return self._owner_id

    def check(self, session: Optional[AuthSession]) -> MigrationState:
        """
        Run when a session becomes authenticated.

        Without a session nothing can be imported and the state stays
        UNCHECKED.
        """
        if session is None:
            return self._state
        if self._state == MigrationState.MIGRATING:
            return self._state

        self._owner_id = session.owner_id

        if self._cache.get_migration_flag() == MigrationFlag.COMPLETED:
            self._state = MigrationState.COMPLETED
            return self._state

        expenses = self._cache.load_expenses()
        budgets = self._cache.load_budgets()
        if not expenses and not budgets:
            # Nothing to import; the flag stays as it is
            self._state = MigrationState.COMPLETED
            return self._state

        self._cache.set_migration_flag(MigrationFlag.PENDING)
        self._state = MigrationState.PENDING
        logger.info(
            "local_data_detected",
            owner_id=str(session.owner_id),
            expenses=len(expenses),
            budgets=len(budgets),
        )
        if self._audit_logger:
            self._audit_logger.log_migration_detected(
                owner_id=session.owner_id,
                expense_count=len(expenses),
                budget_count=len(budgets),
            )
        return self._state

    async def confirm(self) -> MigrationResult:
        """
        Import the local records under the signed-in owner.

        Raises:
            MigrationError: If no migration is pending or any step fails.
                The state returns to PENDING so the user can retry.
        """
        if self._state != MigrationState.PENDING or self._owner_id is None:
            raise MigrationError(
                f"No pending migration (state: {self._state.value})"
            )

        owner_id = self._owner_id
        self._state = MigrationState.MIGRATING
        if self._audit_logger:
            self._audit_logger.log_migration_started(owner_id)

        try:
            expenses, budgets = self._read_local_records()
        except ValidationError as e:
            self._fail(owner_id, MigrationStage.READ, e)
            raise MigrationError(
                f"Local data is malformed: {e}", MigrationStage.READ
            ) from e

        try:
            expenses_imported = await self._storage.import_expenses(owner_id, expenses)
        except StorageError as e:
            self._fail(owner_id, MigrationStage.EXPENSES, e)
            raise MigrationError(
                f"Failed to import expenses: {e}", MigrationStage.EXPENSES
            ) from e

        try:
            budgets_imported = await self._storage.import_budgets(owner_id, budgets)
        except StorageError as e:
            self._fail(owner_id, MigrationStage.BUDGETS, e)
            raise MigrationError(
                f"Failed to import budgets: {e}", MigrationStage.BUDGETS
            ) from e

        try:
            self._cache.clear_records()
            self._cache.set_migration_flag(MigrationFlag.COMPLETED)
        except LocalCacheError as e:
            self._fail(owner_id, MigrationStage.FINALIZE, e)
            raise MigrationError(
                f"Imported, but failed to clear local data: {e}",
                MigrationStage.FINALIZE,
            ) from e

        self._state = MigrationState.COMPLETED
        result = MigrationResult(
            expenses_imported=expenses_imported,
            expenses_skipped=len(expenses) - expenses_imported,
            budgets_imported=budgets_imported,
            budgets_skipped=len(budgets) - budgets_imported,
        )
        logger.info("local_data_migrated", owner_id=str(owner_id), **result.model_dump())
        if self._audit_logger:
            self._audit_logger.log_migration_completed(
                owner_id=owner_id,
                expenses_imported=expenses_imported,
                budgets_imported=budgets_imported,
            )
        return result

    def decline(self) -> MigrationState:
        """
        The user chose not to import.

        The device is marked completed so it is not asked again;
        local records are left where they are.
        """
        if self._state != MigrationState.PENDING:
            raise MigrationError(
                f"No pending migration (state: {self._state.value})"
            )

        self._cache.set_migration_flag(MigrationFlag.COMPLETED)
        self._state = MigrationState.COMPLETED
        if self._audit_logger and self._owner_id:
            self._audit_logger.log_migration_declined(self._owner_id)
        return self._state

    def _read_local_records(self) -> tuple[list[CachedExpense], list[CachedBudget]]:
        expenses = [CachedExpense.model_validate(r) for r in self._cache.load_expenses()]
        budgets = [CachedBudget.model_validate(r) for r in self._cache.load_budgets()]
        return expenses, budgets

    def _fail(self, owner_id: UUID, stage: MigrationStage, error: Exception) -> None:
        self._state = MigrationState.PENDING
        logger.error(
            "local_data_migration_failed",
            owner_id=str(owner_id),
            stage=stage.value,
            error=str(error),
        )
        if self._audit_logger:
            self._audit_logger.log_migration_failed(
                owner_id=owner_id,
                stage=stage.value,
                error_message=str(error),
            )
