"""
Audit Logger

DESIGN DECISION: Every significant action on the ledger is logged.
This provides:
1. Complete traceability of stock movements
2. Debugging capability for sync problems
3. A record of destructive actions (restore, pull, deletion)

The audit logger:
- Is synchronous, because ledger mutations are synchronous
- Never raises (a logging failure must not undo a mutation)
- Tags every event with the account it belongs to
"""

from typing import Optional

import structlog

from pantry_ledger.models.audit import AuditEvent, AuditEventBuilder, AuditEventType


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
        structlog.processors.JSONRenderer(ensure_ascii=False)
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Writes each event to the structured local log, routed by severity.
    Keeps the most recent events in memory for inspection.
    """

    def __init__(self, keep_recent: int = 200):
        self._logger = structlog.get_logger("pantry_ledger.audit")
        self._keep_recent = keep_recent
        self._recent: list[AuditEvent] = []

    @property
    def recent_events(self) -> list[AuditEvent]:
        """Recent events, newest first."""
        return list(self._recent)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event."""
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        self._recent.insert(0, event)
        del self._recent[self._keep_recent:]

    def log_account_event(
        self,
        username: str,
        event_type: AuditEventType,
        description: str,
    ) -> None:
        """Log a registration, login, logout or deletion."""
        self.log(AuditEventBuilder.account_event(
            username=username,
            event_type=event_type,
            description=description,
        ))

    def log_sync_failed(
        self,
        username: str,
        operation: str,
        error_message: str,
        status_code: Optional[int] = None,
    ) -> None:
        """Log a failed push or pull."""
        self.log(AuditEventBuilder.sync_failed(
            username=username,
            operation=operation,
            error_message=error_message,
            status_code=status_code,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        username: Optional[str] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            username=username,
        ))
