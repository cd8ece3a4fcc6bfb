"""Event Log Service database runtime wiring."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from packages.eventlog_shared.config import RuntimeSettings
from resources.substrates.postgres import (
    create_postgres_engine,
    create_session_factory,
    resolve_postgres_settings,
)

from .schema import metadata


@dataclass(frozen=True)
class EventLogRuntime:
    """Concrete handle for Event Log Service database access."""

    engine: Engine
    session_factory: sessionmaker[Session]

    @classmethod
    def from_settings(cls, settings: RuntimeSettings) -> "EventLogRuntime":
        """Build the runtime from typed application settings."""
        engine = create_postgres_engine(resolve_postgres_settings(settings))
        return cls.from_engine(engine)

    @classmethod
    def from_engine(cls, engine: Engine) -> "EventLogRuntime":
        """Wrap an existing engine, for example an in-process SQLite engine."""
        return cls(engine=engine, session_factory=create_session_factory(engine))

    def create_schema(self) -> None:
        """Create the ``event_log`` table and its indexes when missing."""
        metadata.create_all(self.engine)
