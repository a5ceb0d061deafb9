"""
Audit Models for Expense Tracker

Every change to a user's money records is logged for audit purposes.
This provides:
1. Traceability of creates, edits and deletes
2. Debugging information when a store call or migration fails
3. A record of what a device imported and when

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Expenses
    EXPENSE_CREATED = "expense_created"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"

    # Budgets
    BUDGET_SAVED = "budget_saved"

    # Failures of user-initiated writes
    SAVE_FAILED = "save_failed"
    OPTIMISTIC_UPDATE_ROLLED_BACK = "optimistic_update_rolled_back"

    # Local data migration
    MIGRATION_DETECTED = "migration_detected"
    MIGRATION_STARTED = "migration_started"
    MIGRATION_COMPLETED = "migration_completed"
    MIGRATION_FAILED = "migration_failed"
    MIGRATION_DECLINED = "migration_declined"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Who and what
    owner_id: Optional[UUID] = Field(
        default=None,
        description="Owner whose records were touched"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'budget', 'migration')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "owner_id": str(self.owner_id) if self.owner_id else None,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_created(owner_id, expense_id, amount)
        event = AuditEventBuilder.migration_failed(owner_id, "budgets", message)
    """

    @staticmethod
    def expense_created(
        owner_id: UUID,
        expense_id: UUID,
        category: str,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_CREATED,
            owner_id=owner_id,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense recorded: {category} - {amount}",
            details={
                "category": category,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_updated(
        owner_id: UUID,
        expense_id: UUID,
        fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            owner_id=owner_id,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense edited: {', '.join(fields) or 'no fields'}",
            details={"fields": fields},
            is_user_action=True,
        )

    @staticmethod
    def expense_deleted(owner_id: UUID, expense_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            owner_id=owner_id,
            entity_type="expense",
            entity_id=expense_id,
            description="Expense deleted",
            is_user_action=True,
        )

    @staticmethod
    def budget_saved(owner_id: UUID, month: str, amount: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_SAVED,
            owner_id=owner_id,
            entity_type="budget",
            description=f"Budget for {month} set to {amount}",
            details={
                "month": month,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def save_failed(
        owner_id: UUID,
        operation: str,
        error_message: str,
        entity_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            owner_id=owner_id,
            entity_type="expense",
            entity_id=entity_id,
            description=f"Could not {operation}",
            details={"operation": operation},
            error_message=error_message,
        )

    @staticmethod
    def optimistic_rolled_back(owner_id: UUID, operation: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPTIMISTIC_UPDATE_ROLLED_BACK,
            severity=AuditSeverity.WARNING,
            owner_id=owner_id,
            description=f"Optimistic {operation} rolled back",
            details={"operation": operation},
        )

    @staticmethod
    def migration_detected(
        owner_id: UUID,
        expense_count: int,
        budget_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MIGRATION_DETECTED,
            owner_id=owner_id,
            entity_type="migration",
            description="Local data found on this device",
            details={
                "expense_count": expense_count,
                "budget_count": budget_count,
            },
        )

    @staticmethod
    def migration_started(owner_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MIGRATION_STARTED,
            owner_id=owner_id,
            entity_type="migration",
            description="User confirmed import of local data",
            is_user_action=True,
        )

    @staticmethod
    def migration_completed(
        owner_id: UUID,
        expenses_imported: int,
        budgets_imported: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MIGRATION_COMPLETED,
            owner_id=owner_id,
            entity_type="migration",
            description=(
                f"Imported {expenses_imported} expenses and "
                f"{budgets_imported} budgets"
            ),
            details={
                "expenses_imported": expenses_imported,
                "budgets_imported": budgets_imported,
            },
        )

    @staticmethod
    def migration_failed(
        owner_id: UUID,
        stage: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MIGRATION_FAILED,
            severity=AuditSeverity.ERROR,
            owner_id=owner_id,
            entity_type="migration",
            description=f"Local data import failed at stage: {stage}",
            details={"stage": stage},
            error_message=error_message,
        )

    @staticmethod
    def migration_declined(owner_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MIGRATION_DECLINED,
            owner_id=owner_id,
            entity_type="migration",
            description="User declined import of local data",
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
