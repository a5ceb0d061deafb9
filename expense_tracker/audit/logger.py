"""
Audit Logger

DESIGN DECISION: Every change to a user's records is logged.
This provides:
1. Complete traceability
2. Debugging capability when the store or a migration fails

The audit logger:
- Writes structured JSON log lines through structlog
- Gracefully handles failures (never breaks the operation being audited)
"""

from collections import deque
from typing import Optional
from uuid import UUID

import structlog

from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditSeverity,
)


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


# Events kept in memory per logger
DEFAULT_HISTORY_SIZE = 200


class AuditLogger:
    """
    Central audit logging service.

    Every event goes to the structured local log. The most recent
    ``history_size`` events are also kept in ``events`` so callers
    (and tests) can inspect what just happened; older ones are dropped.
    """

    def __init__(
        self,
        name: str = "expense_tracker.audit",
        history_size: int = DEFAULT_HISTORY_SIZE,
    ):
        self._logger = structlog.get_logger(name)
        self.events: deque[AuditEvent] = deque(maxlen=history_size)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True if the event was written to the local log.
        """
        self.events.append(event)
        log_dict = event.to_log_dict()

        try:
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            # Audit logging must not break the audited operation
            return False
        return True

    def log_expense_created(
        self,
        owner_id: UUID,
        expense_id: UUID,
        category: str,
        amount: str,
    ) -> None:
        self.log(AuditEventBuilder.expense_created(
            owner_id=owner_id,
            expense_id=expense_id,
            category=category,
            amount=amount,
        ))

    def log_expense_updated(
        self,
        owner_id: UUID,
        expense_id: UUID,
        fields: list[str],
    ) -> None:
        self.log(AuditEventBuilder.expense_updated(
            owner_id=owner_id,
            expense_id=expense_id,
            fields=fields,
        ))

    def log_expense_deleted(self, owner_id: UUID, expense_id: UUID) -> None:
        self.log(AuditEventBuilder.expense_deleted(owner_id, expense_id))

    def log_budget_saved(self, owner_id: UUID, month: str, amount: str) -> None:
        self.log(AuditEventBuilder.budget_saved(owner_id, month, amount))

    def log_save_failed(
        self,
        owner_id: UUID,
        operation: str,
        error_message: str,
        entity_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.save_failed(
            owner_id=owner_id,
            operation=operation,
            error_message=error_message,
            entity_id=entity_id,
        ))

    def log_rollback(self, owner_id: UUID, operation: str) -> None:
        self.log(AuditEventBuilder.optimistic_rolled_back(owner_id, operation))

    def log_migration_detected(
        self,
        owner_id: UUID,
        expense_count: int,
        budget_count: int,
    ) -> None:
        self.log(AuditEventBuilder.migration_detected(
            owner_id=owner_id,
            expense_count=expense_count,
            budget_count=budget_count,
        ))

    def log_migration_started(self, owner_id: UUID) -> None:
        self.log(AuditEventBuilder.migration_started(owner_id))

    def log_migration_completed(
        self,
        owner_id: UUID,
        expenses_imported: int,
        budgets_imported: int,
    ) -> None:
        self.log(AuditEventBuilder.migration_completed(
            owner_id=owner_id,
            expenses_imported=expenses_imported,
            budgets_imported=budgets_imported,
        ))

    def log_migration_failed(
        self,
        owner_id: UUID,
        stage: str,
        error_message: str,
    ) -> None:
        self.log(AuditEventBuilder.migration_failed(
            owner_id=owner_id,
            stage=stage,
            error_message=error_message,
        ))

    def log_migration_declined(self, owner_id: UUID) -> None:
        self.log(AuditEventBuilder.migration_declined(owner_id))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
        ))
