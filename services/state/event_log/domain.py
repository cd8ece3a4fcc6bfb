"""Domain contracts for Event Log Service records and attribution."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict

UNKNOWN_CALLER = "Unknown"

CALLER_NAME_MAX_LENGTH = 128
ACTOR_MAX_LENGTH = 128


class Severity(str, Enum):
    """Closed severity set written by the fixed-severity facades."""

    TRACE = "TRACE"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"

    @classmethod
    def parse(cls, value: str | None) -> "Severity | None":
        """Map a stored severity string to a member, or ``None`` if unrecognized.

        The base recorder stores severities verbatim, so readers must tolerate
        values outside the closed set.
        """
        if value is None:
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


class CallerIdentity(BaseModel):
    """``schema.objectName`` identity of one calling unit of work."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    schema_name: str
    object_name: str

    @property
    def qualified_name(self) -> str:
        """Return the dotted ``schema.objectName`` form."""
        return f"{self.schema_name}.{self.object_name}"


class Attribution(BaseModel):
    """Resolved caller name plus the optional note describing how it was found."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    caller_name: str
    note: str | None = None
    strategy: str | None = None


class LogRecord(BaseModel):
    """One persisted, immutable event-log row."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: int
    timestamp: datetime
    caller_name: str
    event_type: str
    severity: str
    message: str | None
    actor: str
    context: str | None

    @property
    def severity_level(self) -> Severity | None:
        """Return the parsed severity, ``None`` for unrecognized stored values."""
        return Severity.parse(self.severity)
