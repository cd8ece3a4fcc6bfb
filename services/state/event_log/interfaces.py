"""Transport-neutral protocol interfaces used by Event Log Service."""

from __future__ import annotations

from typing import Protocol

from sqlalchemy.orm import Session

from services.state.event_log.domain import CallerIdentity, LogRecord


class EventLogRepository(Protocol):
    """Protocol for the append-only event-log store."""

    def insert(
        self,
        *,
        caller_name: str,
        event_type: str,
        severity: str,
        message: str | None,
        actor: str,
        context: str | None,
        session: Session | None = None,
    ) -> int:
        """Append one record, assigning id and timestamp, and return its id."""

    def get(self, *, log_id: int) -> LogRecord | None:
        """Read one record by id."""

    def list_by_severity(self, *, severity: str, limit: int) -> list[LogRecord]:
        """Read records with one severity, newest first."""

    def list_by_caller(self, *, caller_name: str, limit: int) -> list[LogRecord]:
        """Read records attributed to one caller, newest first."""


class IdentityProvider(Protocol):
    """Supplies the executing principal and the currently-executing unit."""

    def current_principal(self) -> str:
        """Return the identity recorded as a record's ``actor``."""

    def current_unit(self) -> CallerIdentity | None:
        """Return the innermost unit of work bound to the execution context."""
