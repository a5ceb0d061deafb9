"""
Device-Local Cache Interface

Holds records a user saved on this device before signing in, plus
the per-device migration flag. Unlike the remote store this is
synchronous: it is a small document on the device itself.
"""

from abc import ABC, abstractmethod

from expense_tracker.models.migration import MigrationFlag


class LocalCacheInterface(ABC):
    """
    Abstract interface for the device-local cache.

    Records are returned raw (as stored); parsing them into models is
    the migration routine's job so that it can report bad records.
    """

    @abstractmethod
    def load_expenses(self) -> list[dict]:
        """Expenses saved on this device before sign-in."""
        pass

    @abstractmethod
    def load_budgets(self) -> list[dict]:
        """Budgets saved on this device before sign-in."""
        pass

    @abstractmethod
    def clear_records(self) -> None:
        """Remove all cached expenses and budgets (the flag is kept)."""
        pass

    @abstractmethod
    def get_migration_flag(self) -> MigrationFlag:
        """Persisted migration state of this device."""
        pass

    @abstractmethod
    def set_migration_flag(self, flag: MigrationFlag) -> None:
        """Persist the migration state of this device."""
        pass

    def has_records(self) -> bool:
        return bool(self.load_expenses() or self.load_budgets())


class LocalCacheError(Exception):
    """The device-local cache could not be written."""
    pass
