"""Exceptions raised by the Event Log Service public API."""

from __future__ import annotations

from packages.eventlog_shared.errors import ErrorDetail


class EventLogError(RuntimeError):
    """Base error carrying a structured ``ErrorDetail``."""

    def __init__(self, error: ErrorDetail) -> None:
        super().__init__(error.message)
        self.error = error


class EventLogValidationError(EventLogError, ValueError):
    """Raised when a logging call is rejected before touching storage."""


class EventLogStorageError(EventLogError):
    """Raised when the event-log store fails to append or read records."""
