"""
Audit Logger

Every mode change and every mutation of the synchronization layer is
logged as a structured event. The audit logger:
- Logs locally through structlog (JSON lines)
- Never raises: a logging problem must not break a user's mutation
"""

import logging
from collections import deque
from typing import Optional

import structlog

from finance_tracker.models.audit import AuditEvent, AuditSeverity


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


def configure_logging(debug: bool = False) -> None:
    """Route structlog output through the root logger at the wanted level."""
    logging.basicConfig(
        format="%(message)s",
        level=logging.DEBUG if debug else logging.INFO,
    )


def get_logger(name: Optional[str] = None):
    """Get a structlog logger bound to the shared configuration."""
    return structlog.get_logger(name)


class AuditLogger:
    """
    Central audit logging service.

    Keeps the most recent events in memory so a front-end can show what
    happened during the session (for example why the mode flipped).
    """

    def __init__(self, history_size: int = 100):
        self._logger = get_logger("finance_tracker.audit")
        self._history: deque[AuditEvent] = deque(maxlen=max(history_size, 0))

    def log(self, event: AuditEvent) -> None:
        """Log an audit event locally."""
        self._history.append(event)

        log_dict = event.to_log_dict()
        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Logging must not break the main flow
            logging.getLogger(__name__).warning("audit logging failed: %s", e)

    @property
    def recent_events(self) -> list[AuditEvent]:
        """Most recent events, newest first."""
        return list(reversed(self._history))
