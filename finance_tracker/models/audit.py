"""
Audit Models for Finance Tracker

Every mutation and every mode change of the synchronization layer is
recorded as an AuditEvent. This gives a readable trail of when the tracker
went offline and which rows were written locally instead of remotely.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Startup and mode
    SYNC_STARTED = "sync_started"
    MODE_CHANGED = "mode_changed"
    RECONNECT_ATTEMPTED = "reconnect_attempted"

    # Remote failures that were absorbed
    REMOTE_FALLBACK = "remote_fallback"

    # Mutations
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"
    TRANSACTIONS_CLEARED = "transactions_cleared"

    # Local cache faults that were absorbed
    CACHE_FAULT = "cache_fault"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """A single audit event."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Transaction ids are plain strings (remote or local_ prefixed)
    entity_id: Optional[str] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.mode_changed("online", "offline", "insert")
        event = AuditEventBuilder.transaction_added(transaction_id, local=True)
    """

    @staticmethod
    def sync_started(state: str, transaction_count: int, has_identity: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_STARTED,
            description=f"Sync started in {state} mode with {transaction_count} transactions",
            details={
                "state": state,
                "transaction_count": transaction_count,
                "has_identity": has_identity,
            },
        )

    @staticmethod
    def mode_changed(previous: str, current: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MODE_CHANGED,
            severity=(
                AuditSeverity.WARNING if current == "offline" else AuditSeverity.INFO
            ),
            description=f"Mode changed from {previous} to {current}",
            details={
                "previous": previous,
                "current": current,
                "reason": reason,
            },
        )

    @staticmethod
    def reconnect_attempted(succeeded: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECONNECT_ATTEMPTED,
            severity=AuditSeverity.INFO if succeeded else AuditSeverity.WARNING,
            description="Reconnect succeeded" if succeeded else "Reconnect failed",
            details={"succeeded": succeeded},
        )

    @staticmethod
    def remote_fallback(
        operation: str,
        error_kind: str,
        error_message: str,
        transaction_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REMOTE_FALLBACK,
            severity=AuditSeverity.WARNING,
            entity_id=transaction_id,
            description=f"Remote {operation} failed ({error_kind}); completed locally",
            details={
                "operation": operation,
                "error_kind": error_kind,
            },
            error_message=error_message,
        )

    @staticmethod
    def transaction_added(transaction_id: str, local: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_id=transaction_id,
            description=f"Transaction added {'locally' if local else 'remotely'}",
            details={"local": local},
        )

    @staticmethod
    def transaction_updated(transaction_id: str, local: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_UPDATED,
            entity_id=transaction_id,
            description=f"Transaction updated {'locally' if local else 'remotely'}",
            details={"local": local},
        )

    @staticmethod
    def transaction_deleted(transaction_id: str, found: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_id=transaction_id,
            description=(
                "Transaction deleted" if found else "Delete requested for unknown transaction"
            ),
            details={"found": found},
        )

    @staticmethod
    def transactions_cleared(count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_CLEARED,
            severity=AuditSeverity.WARNING,
            description=f"Cleared {count} transactions from this device",
            details={"count": count},
        )

    @staticmethod
    def cache_fault(operation: str, key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CACHE_FAULT,
            severity=AuditSeverity.ERROR,
            description=f"Local cache {operation} failed; the session continues in memory",
            details={
                "operation": operation,
                "key": key,
            },
            error_message=error_message,
        )
