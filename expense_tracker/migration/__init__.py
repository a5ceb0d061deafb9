"""Local data migration package."""

from expense_tracker.migration.routine import LocalDataMigration, MigrationError

__all__ = ["LocalDataMigration", "MigrationError"]
