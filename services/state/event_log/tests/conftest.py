"""Shared fixtures for Event Log Service tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from services.state.event_log.config import EventLogSettings
from services.state.event_log.data import EventLogRuntime, PostgresEventLogRepository
from services.state.event_log.implementation import DefaultEventLogService


@pytest.fixture
def runtime() -> Iterator[EventLogRuntime]:
    """In-memory SQLite runtime with the event_log schema created."""
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    handle = EventLogRuntime.from_engine(engine)
    handle.create_schema()
    try:
        yield handle
    finally:
        engine.dispose()


@pytest.fixture
def repository(runtime: EventLogRuntime) -> PostgresEventLogRepository:
    return PostgresEventLogRepository(runtime.session_factory)


@pytest.fixture
def settings() -> EventLogSettings:
    return EventLogSettings(default_principal="svc-tester")


@pytest.fixture
def service(
    settings: EventLogSettings, repository: PostgresEventLogRepository
) -> DefaultEventLogService:
    return DefaultEventLogService(settings=settings, repository=repository)
