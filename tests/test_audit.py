"""Tests for the audit logger."""

from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from budget_tracker.audit import AuditLogger, create_correlation_id
from budget_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditEventType, AuditSeverity


@pytest.fixture
def audit():
    logger = AuditLogger(correlation_id=uuid4())
    logger._logger = MagicMock()
    return logger


class TestAuditLogger:
    """Tests for AuditLogger.log."""

    @pytest.mark.parametrize("severity, method", [
        (AuditSeverity.DEBUG, "debug"),
        (AuditSeverity.INFO, "info"),
        (AuditSeverity.WARNING, "warning"),
        (AuditSeverity.ERROR, "error"),
        (AuditSeverity.CRITICAL, "error"),
    ])
    def test_level_follows_severity(self, audit, severity, method):
        """Test each severity goes to the matching log method."""
        event = AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=severity,
            description="test",
        )
        assert audit.log(event) is True
        getattr(audit._logger, method).assert_called_once()
        args, kwargs = getattr(audit._logger, method).call_args
        assert args == ("audit_event",)
        assert kwargs["event_type"] == "system_error"

    def test_session_correlation_id_attached(self, audit):
        """Test events without a correlation id get the session's."""
        audit.log(AuditEventBuilder.transaction_removed(transaction_id=5))
        kwargs = audit._logger.info.call_args.kwargs
        assert kwargs["correlation_id"] == str(audit.correlation_id)
        assert kwargs["entity_id"] == 5

    def test_own_correlation_id_kept(self, audit):
        """Test an event's own correlation id wins."""
        correlation_id = uuid4()
        audit.log(AuditEventBuilder.ledger_cleared(removed_count=0, correlation_id=correlation_id))
        assert audit._logger.info.call_args.kwargs["correlation_id"] == str(correlation_id)

    def test_logging_failure_does_not_raise(self, audit):
        """Test a broken log handler is reported, not raised."""
        audit._logger.info.side_effect = RuntimeError("handler broke")
        assert audit.log(AuditEventBuilder.transaction_removed(transaction_id=5)) is False

    def test_default_correlation_id(self):
        """Test a session id is created when none is given."""
        assert AuditLogger().correlation_id is not None

    def test_create_correlation_id_unique(self):
        """Test correlation ids are unique."""
        assert create_correlation_id() != create_correlation_id()
