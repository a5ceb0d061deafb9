"""In-memory local cache for tests."""

from copy import deepcopy
from typing import Optional

from expense_tracker.models.migration import MigrationFlag
from expense_tracker.services.local_cache.interface import LocalCacheInterface


class InMemoryLocalCache(LocalCacheInterface):

    def __init__(
        self,
        expenses: Optional[list[dict]] = None,
        budgets: Optional[list[dict]] = None,
        flag: MigrationFlag = MigrationFlag.ABSENT,
    ):
        self.expenses = list(expenses or [])
        self.budgets = list(budgets or [])
        self.flag = flag

    def load_expenses(self) -> list[dict]:
        return deepcopy(self.expenses)

    def load_budgets(self) -> list[dict]:
        return deepcopy(self.budgets)

    def clear_records(self) -> None:
        self.expenses = []
        self.budgets = []

    def get_migration_flag(self) -> MigrationFlag:
        return self.flag

    def set_migration_flag(self, flag: MigrationFlag) -> None:
        self.flag = flag
