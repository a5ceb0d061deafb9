"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker core.
All data flowing through the system must conform to these schemas.
"""

from expense_tracker.models.expense import (
    CATEGORY_DISPLAY,
    CachedBudget,
    CachedExpense,
    Category,
    Expense,
    ExpenseFields,
    ExpenseUpdate,
    MonthlyBudget,
    PaymentMethod,
    is_month_key,
    month_key,
)
from expense_tracker.models.migration import (
    MigrationFlag,
    MigrationResult,
    MigrationStage,
    MigrationState,
)
from expense_tracker.models.session import AuthSession
from expense_tracker.models.summary import (
    BudgetLevel,
    BudgetStatus,
    CategoryShare,
    CategoryTotal,
    DashboardSummary,
    MonthlyTotal,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Record models
    "CATEGORY_DISPLAY",
    "CachedBudget",
    "CachedExpense",
    "Category",
    "Expense",
    "ExpenseFields",
    "ExpenseUpdate",
    "MonthlyBudget",
    "PaymentMethod",
    "is_month_key",
    "month_key",
    # Migration models
    "MigrationFlag",
    "MigrationResult",
    "MigrationStage",
    "MigrationState",
    # Session
    "AuthSession",
    # Summary models
    "BudgetLevel",
    "BudgetStatus",
    "CategoryShare",
    "CategoryTotal",
    "DashboardSummary",
    "MonthlyTotal",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
