"""
Audit Models for Budget Tracker

Every ledger mutation, recovery and failure produces an audit event.
This provides:
1. A trail of what changed the ledger and when
2. Debugging information when storage misbehaves
3. Visibility into silent recoveries (a corrupt stored ledger is
   replaced by an empty one, which must never go unnoticed in the log)

DESIGN DECISION: Audit events are write-only. Nothing in the ledger reads
them back, so logging can never change ledger behaviour.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Lifecycle
    LEDGER_LOADED = "ledger_loaded"
    LEDGER_RECOVERED = "ledger_recovered"

    # Mutations
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_REMOVED = "transaction_removed"
    LEDGER_CLEARED = "ledger_cleared"

    # Rejections and failures
    INPUT_REJECTED = "input_rejected"
    SAVE_FAILED = "save_failed"

    # Export
    EXPORT_COMPLETED = "export_completed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
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

    # Context - which transaction is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'ledger')"
    )
    entity_id: Optional[int] = Field(
        default=None,
        description="Transaction id this event relates to"
    )

    # Correlation - one id per session
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate events from the same session"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

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
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_added(
            transaction_id=tx.id,
            amount=str(tx.amount),
            correlation_id=session_id,
        )
    """

    @staticmethod
    def ledger_loaded(
        storage_key: str,
        transaction_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Ledger loaded with {transaction_count} transactions",
            details={
                "storage_key": storage_key,
                "transaction_count": transaction_count,
            },
        )

    @staticmethod
    def ledger_recovered(
        storage_key: str,
        reason: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_RECOVERED,
            severity=AuditSeverity.WARNING,
            entity_type="ledger",
            correlation_id=correlation_id,
            description="Stored ledger unusable, starting with an empty ledger",
            details={
                "storage_key": storage_key,
            },
            error_message=reason,
        )

    @staticmethod
    def transaction_added(
        transaction_id: int,
        amount: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction added: {amount}",
            details={
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_removed(
        transaction_id: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_REMOVED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction {transaction_id} removed",
            is_user_action=True,
        )

    @staticmethod
    def ledger_cleared(
        removed_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_CLEARED,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Ledger cleared ({removed_count} transactions removed)",
            details={
                "removed_count": removed_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def input_rejected(
        fields: list[str],
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INPUT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            correlation_id=correlation_id,
            description="Transaction input rejected",
            details={
                "fields": fields,
            },
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def save_failed(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Could not persist ledger after {operation}; change rolled back",
            details={
                "operation": operation,
            },
            error_message=error_message,
        )

    @staticmethod
    def export_completed(
        filename: str,
        row_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_COMPLETED,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Exported {row_count} transactions to {filename}",
            details={
                "filename": filename,
                "row_count": row_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
