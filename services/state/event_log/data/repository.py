"""Authoritative SQL repository for Event Log Service records."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import insert, select
from sqlalchemy.orm import Session, sessionmaker

from resources.substrates.postgres.session import transactional_session
from services.state.event_log.domain import LogRecord
from services.state.event_log.interfaces import EventLogRepository

from .schema import event_log


def _utc_now() -> datetime:
    return datetime.now(UTC)


class PostgresEventLogRepository(EventLogRepository):
    """Append-only SQL repository over the ``event_log`` table."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock

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
        """Append one row and return the identity assigned to this insert.

        With ``session`` the row joins that session's transaction and is only
        durable once the caller commits; otherwise it commits on its own.
        """
        values = {
            "event_time": self._clock(),
            "procedure_name": caller_name,
            "event_type": event_type,
            "severity": severity,
            "message": message,
            "username": actor,
            "additional_info": context,
        }
        if session is not None:
            return _insert_row(session, values)
        with transactional_session(self._session_factory) as owned:
            return _insert_row(owned, values)

    def get(self, *, log_id: int) -> LogRecord | None:
        """Read one record by id."""
        with transactional_session(self._session_factory) as session:
            row = (
                session.execute(select(event_log).where(event_log.c.log_id == log_id))
                .mappings()
                .one_or_none()
            )
            return None if row is None else _to_record(row)

    def list_by_severity(self, *, severity: str, limit: int) -> list[LogRecord]:
        """Read records with one severity, newest first."""
        return self._list(event_log.c.severity == severity, limit=limit)

    def list_by_caller(self, *, caller_name: str, limit: int) -> list[LogRecord]:
        """Read records attributed to one caller, newest first."""
        return self._list(event_log.c.procedure_name == caller_name, limit=limit)

    def _list(self, criterion: Any, *, limit: int) -> list[LogRecord]:
        with transactional_session(self._session_factory) as session:
            rows = (
                session.execute(
                    select(event_log)
                    .where(criterion)
                    .order_by(event_log.c.event_time.desc(), event_log.c.log_id.desc())
                    .limit(limit)
                )
                .mappings()
                .all()
            )
            return [_to_record(row) for row in rows]


def _insert_row(session: Session, values: dict[str, Any]) -> int:
    result = session.execute(insert(event_log).values(**values))
    primary_key = result.inserted_primary_key
    if primary_key is None or primary_key[0] is None:
        raise RuntimeError("event_log insert did not return an identity")
    return int(primary_key[0])


def _to_record(row: Any) -> LogRecord:
    """Map one SQL row to a strict domain record."""
    return LogRecord(
        id=int(row["log_id"]),
        timestamp=_row_dt(row, "event_time"),
        caller_name=str(row["procedure_name"]),
        event_type=str(row["event_type"]),
        severity=str(row["severity"]),
        message=row["message"],
        actor=str(row["username"]),
        context=row["additional_info"],
    )


def _row_dt(row: Any, column: str) -> datetime:
    """Read and normalize one timezone-aware datetime field from SQL row."""
    value = row.get(column)
    if not isinstance(value, datetime):
        raise ValueError(f"expected datetime column for {column}")
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
