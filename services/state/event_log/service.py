"""Authoritative in-process Python API for Event Log Service."""

from __future__ import annotations

from abc import ABC, abstractmethod

from sqlalchemy.orm import Session

from packages.eventlog_shared.config import RuntimeSettings
from services.state.event_log.domain import LogRecord
from services.state.event_log.faults import FaultContext
from services.state.event_log.interfaces import EventLogRepository, IdentityProvider


class EventLogService(ABC):
    """Public API for recording and reading event-log records.

    Every write method returns the id of the record it appended. Storage
    failures raise ``EventLogStorageError``; rejected input raises
    ``EventLogValidationError``.
    """

    @abstractmethod
    def record(
        self,
        caller_name: str | None = None,
        *,
        event_type: str,
        severity: str,
        message: str | None = None,
        context: str | None = None,
        auto_detect_caller: bool | None = None,
        session: Session | None = None,
    ) -> int:
        """Append one record with an arbitrary severity string."""

    @abstractmethod
    def trace(
        self,
        caller_name: str | None = None,
        *,
        event_type: str,
        message: str | None = None,
        context: str | None = None,
        auto_detect_caller: bool | None = None,
        session: Session | None = None,
    ) -> int:
        """Append one ``TRACE`` record."""

    @abstractmethod
    def info(
        self,
        caller_name: str | None = None,
        *,
        event_type: str,
        message: str | None = None,
        context: str | None = None,
        auto_detect_caller: bool | None = None,
        session: Session | None = None,
    ) -> int:
        """Append one ``INFO`` record."""

    @abstractmethod
    def warn(
        self,
        caller_name: str | None = None,
        *,
        event_type: str,
        message: str | None = None,
        context: str | None = None,
        auto_detect_caller: bool | None = None,
        session: Session | None = None,
    ) -> int:
        """Append one ``WARN`` record."""

    @abstractmethod
    def error(
        self,
        caller_name: str | None = None,
        *,
        event_type: str,
        message: str | None = None,
        context: str | None = None,
        include_fault_details: bool = True,
        fault: FaultContext | BaseException | None = None,
        auto_detect_caller: bool | None = None,
        session: Session | None = None,
    ) -> int:
        """Append one ``ERROR`` record, optionally with fault details."""

    @abstractmethod
    def get(self, log_id: int) -> LogRecord | None:
        """Read one record by id."""

    @abstractmethod
    def list_by_severity(self, severity: str, *, limit: int = 100) -> list[LogRecord]:
        """Read the newest records with one severity."""

    @abstractmethod
    def list_by_caller(self, caller_name: str, *, limit: int = 100) -> list[LogRecord]:
        """Read the newest records attributed to one caller."""


def build_event_log_service(
    *,
    settings: RuntimeSettings,
    repository: EventLogRepository | None = None,
    identity_provider: IdentityProvider | None = None,
) -> EventLogService:
    """Build the default Event Log implementation from typed settings."""
    from services.state.event_log.config import resolve_event_log_settings
    from services.state.event_log.data import EventLogRuntime, PostgresEventLogRepository
    from services.state.event_log.implementation import DefaultEventLogService

    if repository is None:
        runtime = EventLogRuntime.from_settings(settings)
        repository = PostgresEventLogRepository(runtime.session_factory)
    return DefaultEventLogService(
        settings=resolve_event_log_settings(settings),
        repository=repository,
        identity_provider=identity_provider,
    )
