"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for the remote store.
This allows us to:
1. Swap Google Sheets for a real database later
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

Ownership is NOT checked here. Every implementation talks to a store
that only lets the signed-in owner see and change their own rows;
callers receive whatever error that store raises.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from decimal import Decimal
from typing import Optional, Union
from uuid import UUID

from expense_tracker.models.expense import (
    CachedBudget,
    CachedExpense,
    Expense,
    ExpenseFields,
    ExpenseUpdate,
    MonthlyBudget,
)


class ExpenseStorageInterface(ABC):
    """
    Abstract interface for expense and budget storage operations.

    Any storage implementation (Google Sheets, PostgreSQL, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def list_expenses(self, owner_id: UUID) -> list[Expense]:
        """
        List all expenses of an owner.

        Returns:
            Expenses ordered by date, newest first. An empty list
            means the owner has no expenses.

        Raises:
            StorageError: If the query fails
        """
        pass

    @abstractmethod
    async def create_expense(
        self,
        owner_id: UUID,
        fields: Union[ExpenseFields, Mapping],
    ) -> Expense:
        """
        Create a new expense owned by ``owner_id``.

        The fields are validated before anything is sent to the store.

        Returns:
            The stored expense with its assigned id and created_at

        Raises:
            pydantic.ValidationError: If the fields are malformed
            StorageError: If the insert fails
        """
        pass

    @abstractmethod
    async def update_expense(
        self,
        expense_id: UUID,
        changes: Union[ExpenseUpdate, Mapping],
    ) -> Expense:
        """
        Update only the supplied fields of an expense.

        Returns:
            The expense as stored after the update

        Raises:
            pydantic.ValidationError: If the changes are malformed
            NotFoundError: If the expense doesn't exist
            AccessDeniedError: If the expense belongs to another owner
        """
        pass

    @abstractmethod
    async def delete_expense(self, expense_id: UUID) -> None:
        """
        Delete an expense.

        Deleting an id that no longer exists succeeds.

        Raises:
            AccessDeniedError: If the expense belongs to another owner
            StorageError: If the delete fails
        """
        pass

    @abstractmethod
    async def list_budgets(self, owner_id: UUID) -> list[MonthlyBudget]:
        """
        List all monthly budgets of an owner, newest month first.
        """
        pass

    @abstractmethod
    async def get_budget_for_month(
        self,
        owner_id: UUID,
        month: str,
    ) -> Optional[MonthlyBudget]:
        """
        Get the budget for one month.

        Returns:
            The budget if one was saved, None otherwise
        """
        pass

    @abstractmethod
    async def save_budget(
        self,
        owner_id: UUID,
        month: str,
        amount: Decimal,
    ) -> MonthlyBudget:
        """
        Create or overwrite the budget for (owner_id, month).

        Raises:
            pydantic.ValidationError: If month or amount is malformed
            StorageError: If the upsert fails
        """
        pass

    @abstractmethod
    async def import_expenses(
        self,
        owner_id: UUID,
        records: list[CachedExpense],
    ) -> int:
        """
        Bulk insert expenses that were saved on a device.

        Original ids and creation times are kept. Expenses whose id
        already exists in the store are skipped.

        Returns:
            Number of expenses actually inserted

        Raises:
            StorageError: If the insert fails (nothing is inserted)
        """
        pass

    @abstractmethod
    async def import_budgets(
        self,
        owner_id: UUID,
        records: list[CachedBudget],
    ) -> int:
        """
        Bulk insert budgets that were saved on a device.

        Months that already have a budget in the store are skipped.

        Returns:
            Number of budgets actually inserted

        Raises:
            StorageError: If the insert fails (nothing is inserted)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


# Name used across the rest of the package for any remote store failure
StoreError = StorageError


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class AccessDeniedError(StorageError):
    """Row belongs to another owner."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
