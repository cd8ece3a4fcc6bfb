"""SQLAlchemy table definitions owned by Event Log Service."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, Index, Integer, MetaData, String, Table, Text

from services.state.event_log.domain import ACTOR_MAX_LENGTH, CALLER_NAME_MAX_LENGTH

metadata = MetaData()

event_log = Table(
    "event_log",
    metadata,
    Column("log_id", Integer, primary_key=True, autoincrement=True),
    Column("event_time", DateTime(timezone=True), nullable=False),
    Column("procedure_name", String(CALLER_NAME_MAX_LENGTH), nullable=False),
    Column("event_type", String(50), nullable=False),
    Column("severity", String(20), nullable=False),
    Column("message", Text, nullable=True),
    Column("username", String(ACTOR_MAX_LENGTH), nullable=False),
    Column("additional_info", Text, nullable=True),
    sqlite_autoincrement=True,
)

Index(
    "ix_event_log_severity",
    event_log.c.severity,
    event_log.c.event_time.desc(),
)
Index(
    "ix_event_log_procedure_name",
    event_log.c.procedure_name,
    event_log.c.event_time.desc(),
)
