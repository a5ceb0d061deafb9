"""Tests for the audit logger."""

from uuid import uuid4

from expense_tracker.audit import AuditLogger
from expense_tracker.audit.logger import DEFAULT_HISTORY_SIZE
from expense_tracker.models.audit import AuditEventType

from tests.conftest import OWNER_A


class TestAuditHistory:
    """Tests for the in-memory event history."""

    def test_events_are_recorded_in_order(self):
        audit_logger = AuditLogger("tests.audit")
        audit_logger.log_budget_saved(OWNER_A, "2026-10", "1000")
        audit_logger.log_expense_deleted(OWNER_A, uuid4())

        assert [e.event_type for e in audit_logger.events] == [
            AuditEventType.BUDGET_SAVED,
            AuditEventType.EXPENSE_DELETED,
        ]

    def test_history_is_capped(self):
        audit_logger = AuditLogger("tests.audit", history_size=3)
        expense_ids = [uuid4() for _ in range(5)]
        for expense_id in expense_ids:
            audit_logger.log_expense_deleted(OWNER_A, expense_id)

        assert len(audit_logger.events) == 3
        # Oldest dropped first
        assert [e.entity_id for e in audit_logger.events] == expense_ids[2:]

    def test_default_history_size(self):
        assert AuditLogger().events.maxlen == DEFAULT_HISTORY_SIZE

    def test_latest_event_is_last(self):
        audit_logger = AuditLogger("tests.audit", history_size=1)
        audit_logger.log_migration_started(OWNER_A)
        assert audit_logger.events[-1].event_type == AuditEventType.MIGRATION_STARTED
