"""
Audit Logger

DESIGN DECISION: Every identity transition and record mutation is logged.
This provides:
1. Traceability of writes that were applied or skipped
2. Debugging capability for per-user scoping issues
3. A visible trail of external-service failures

The audit logger:
- Is synchronous, like the store it observes
- Never raises into the caller
"""

from typing import Optional

import structlog

from lifeledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


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


class AuditLogger:
    """
    Central audit logging service.

    Writes each event to the structured log at a level matching
    its severity. Keeps the most recent events in memory so the
    settings page can show them.
    """

    def __init__(self, history_size: int = 100):
        self._logger = structlog.get_logger("lifeledger.audit")
        self._history: list[AuditEvent] = []
        self._history_size = history_size

    def log(self, event: AuditEvent) -> None:
        """Log an audit event."""
        log_dict = event.to_log_dict()

        try:
            if event.severity is AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity is AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity is AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Logging must not break the main flow
            print(f"WARNING: Failed to write audit event: {e}")

        self._history.append(event)
        if len(self._history) > self._history_size:
            del self._history[: len(self._history) - self._history_size]

    def recent_events(self, limit: int = 20) -> list[AuditEvent]:
        """Most recent events, newest first."""
        return list(reversed(self._history[-limit:]))

    def log_validation_failed(
        self,
        entity_type: str,
        issues: list[dict],
        user_id: Optional[str] = None,
    ) -> None:
        self.log(AuditEventBuilder.validation_failed(entity_type, issues, user_id))

    def log_external_service_error(self, service: str, error_message: str) -> None:
        self.log(AuditEventBuilder.external_service_error(service, error_message))
