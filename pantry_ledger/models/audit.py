"""
Audit Models for Pantry Ledger

Every significant action on the ledger is logged for audit purposes.
This provides:
1. Traceability of every stock movement
2. Debugging information when a sync goes wrong
3. A record of destructive actions (restore, pull, account deletion)

DESIGN DECISION: Audit events are write-only. They are emitted, never edited.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from pantry_ledger.models.store import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Ledger mutations
    INBOUND_RECORDED = "inbound_recorded"
    OUTBOUND_RECORDED = "outbound_recorded"
    OUTBOUND_REJECTED = "outbound_rejected"
    THRESHOLD_UPDATED = "threshold_updated"
    PRODUCT_REMOVED = "product_removed"
    EXCHANGE_RATE_UPDATED = "exchange_rate_updated"

    # Snapshots
    SNAPSHOT_CAPTURED = "snapshot_captured"
    SNAPSHOT_RESTORED = "snapshot_restored"

    # Accounts
    ACCOUNT_REGISTERED = "account_registered"
    ACCOUNT_DELETED = "account_deleted"
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    LOGGED_OUT = "logged_out"

    # Sync
    SYNC_PUSHED = "sync_pushed"
    SYNC_PULLED = "sync_pulled"
    SYNC_NO_REMOTE_DATA = "sync_no_remote_data"
    SYNC_FAILED = "sync_failed"

    # System events
    STATE_SAVE_FAILED = "state_save_failed"
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

    Every significant action creates one of these.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Which account the event belongs to
    username: Optional[str] = None

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'product', 'snapshot', 'account')"
    )
    entity_id: Optional[str] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "username": self.username,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.inbound_recorded(username, transaction)
        event = AuditEventBuilder.sync_failed(username, "push", "HTTP 500")
    """

    @staticmethod
    def movement_recorded(
        username: str,
        event_type: AuditEventType,
        product_id: str,
        quantity: int,
        stock_after: int,
        detail: str,
        transaction_id: str,
    ) -> AuditEvent:
        direction = "in" if event_type == AuditEventType.INBOUND_RECORDED else "out"
        return AuditEvent(
            event_type=event_type,
            username=username,
            entity_type="product",
            entity_id=product_id,
            description=f"Stock {direction}: {product_id} x{quantity} ({detail})",
            details={
                "transaction_id": transaction_id,
                "quantity": quantity,
                "stock_after": stock_after,
                "detail": detail,
            },
        )

    @staticmethod
    def outbound_rejected(
        username: str,
        product_id: str,
        requested: int,
        available: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OUTBOUND_REJECTED,
            severity=AuditSeverity.WARNING,
            username=username,
            entity_type="product",
            entity_id=product_id,
            description=f"Outbound rejected: {product_id} has {available}, asked {requested}",
            details={
                "requested": requested,
                "available": available,
            },
        )

    @staticmethod
    def product_updated(
        username: str,
        event_type: AuditEventType,
        product_id: Optional[str],
        details: dict,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            username=username,
            entity_type="product" if product_id else "ledger",
            entity_id=product_id,
            description=f"{event_type.value.replace('_', ' ').capitalize()}",
            details=details,
        )

    @staticmethod
    def snapshot_captured(
        username: str,
        version_id: str,
        version_tag: str,
        description: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_CAPTURED,
            username=username,
            entity_type="snapshot",
            entity_id=version_id,
            description=f"Snapshot {version_tag} captured",
            details={
                "version_tag": version_tag,
                "description": description,
            },
        )

    @staticmethod
    def snapshot_restored(
        username: str,
        version_id: str,
        version_tag: str,
        code_version: str,
        running_version: str,
    ) -> AuditEvent:
        mismatch = code_version != running_version
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_RESTORED,
            severity=AuditSeverity.WARNING if mismatch else AuditSeverity.INFO,
            username=username,
            entity_type="snapshot",
            entity_id=version_id,
            description=f"Snapshot {version_tag} restored over live data",
            details={
                "snapshot_code_version": code_version,
                "running_code_version": running_version,
                "code_version_mismatch": mismatch,
            },
        )

    @staticmethod
    def account_event(
        username: str,
        event_type: AuditEventType,
        description: str,
    ) -> AuditEvent:
        failed = event_type == AuditEventType.LOGIN_FAILED
        return AuditEvent(
            event_type=event_type,
            severity=AuditSeverity.WARNING if failed else AuditSeverity.INFO,
            username=username,
            entity_type="account",
            entity_id=username,
            description=description,
        )

    @staticmethod
    def sync_completed(
        username: str,
        event_type: AuditEventType,
        version_tag: Optional[str],
        history_size: int,
    ) -> AuditEvent:
        direction = "pushed to" if event_type == AuditEventType.SYNC_PUSHED else "pulled from"
        return AuditEvent(
            event_type=event_type,
            username=username,
            entity_type="sync",
            entity_id=username,
            description=f"Store {direction} remote",
            details={
                "version_tag": version_tag,
                "history_size": history_size,
            },
        )

    @staticmethod
    def sync_no_remote_data(username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_NO_REMOTE_DATA,
            username=username,
            entity_type="sync",
            entity_id=username,
            description="Pull found no remote document",
        )

    @staticmethod
    def sync_failed(
        username: str,
        operation: str,
        error_message: str,
        status_code: Optional[int] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_FAILED,
            severity=AuditSeverity.ERROR,
            username=username,
            entity_type="sync",
            entity_id=username,
            description=f"Sync {operation} failed",
            error_message=error_message,
            details={
                "operation": operation,
                "status_code": status_code,
            },
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        username: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            username=username,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
