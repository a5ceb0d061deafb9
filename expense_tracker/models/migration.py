"""
Migration Models

DESIGN DECISION: Two different state sets are kept apart.

MigrationFlag is what the device PERSISTS between runs.
MigrationState is what the routine holds WHILE the app runs; it adds
the transient "unchecked" and "migrating" states that must never be
written to disk.
"""

from enum import Enum

from pydantic import BaseModel, Field


class MigrationFlag(str, Enum):
    """Per-device persisted migration marker."""
    ABSENT = "absent"
    PENDING = "pending"
    COMPLETED = "completed"


class MigrationState(str, Enum):
    """In-memory state of the one-shot migration."""
    UNCHECKED = "unchecked"
    PENDING = "pending"      # Local data found, waiting for the user
    MIGRATING = "migrating"  # User confirmed, transfer in progress
    COMPLETED = "completed"  # Terminal


class MigrationStage(str, Enum):
    """Where a failed migration stopped."""
    READ = "read"
    EXPENSES = "expenses"
    BUDGETS = "budgets"
    FINALIZE = "finalize"


class MigrationResult(BaseModel):
    """Outcome of a successful migration."""

    expenses_imported: int = Field(default=0, ge=0)
    expenses_skipped: int = Field(default=0, ge=0)
    budgets_imported: int = Field(default=0, ge=0)
    budgets_skipped: int = Field(default=0, ge=0)

    @property
    def total_imported(self) -> int:
        return self.expenses_imported + self.budgets_imported
