from __future__ import annotations

import logging

from .model import DomainEvent

AUDIT_LOGGER_NAME = "school_attendance.audit"


class LoggingAuditHandler:
    """Default event consumer: one audit log line per domain event."""

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger(AUDIT_LOGGER_NAME)

    def __call__(self, event: DomainEvent) -> None:
        self._logger.info(
            event.name,
            extra={"event_name": event.name, "occurred_at": event.occurred_at, "payload": dict(event.payload)},
        )
