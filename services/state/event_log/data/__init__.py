"""Data-layer exports for Event Log Service."""

from services.state.event_log.data.repository import PostgresEventLogRepository
from services.state.event_log.data.runtime import EventLogRuntime
from services.state.event_log.data.schema import event_log, metadata

__all__ = ["EventLogRuntime", "PostgresEventLogRepository", "event_log", "metadata"]
