"""Fault details captured from an exception for ERROR records."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from types import TracebackType

from sqlalchemy.exc import SQLAlchemyError

from packages.eventlog_shared.errors import exception_to_error
from resources.substrates.postgres.errors import normalize_postgres_error
from services.state.event_log.identity import frame_identity


@dataclass(frozen=True)
class FaultContext:
    """Code, location, and message of one in-flight failure."""

    code: str
    message: str
    line: int | None = None
    state: str | None = None
    severity: str | None = None
    procedure: str | None = None

    @classmethod
    def current(cls) -> "FaultContext | None":
        """Capture the exception currently being handled, if any.

        Outside an ``except`` block there is no active fault and ``None`` is
        returned.
        """
        exc = sys.exc_info()[1]
        if exc is None:
            return None
        return cls.from_exception(exc)

    @classmethod
    def from_exception(cls, exc: BaseException) -> "FaultContext":
        """Build fault details from an exception and its traceback."""
        if isinstance(exc, SQLAlchemyError):
            detail = normalize_postgres_error(exc)
        else:
            detail = exception_to_error(exc)

        line: int | None = None
        procedure: str | None = None
        innermost = _innermost(exc.__traceback__)
        if innermost is not None:
            line = innermost.tb_lineno
            identity = frame_identity(innermost.tb_frame)
            if identity is not None:
                procedure = identity.qualified_name

        return cls(
            code=_exception_code(exc),
            message=str(exc),
            line=line,
            state=detail.metadata.get("sqlstate") or _errno(exc),
            severity=detail.category.value,
            procedure=procedure,
        )

    def render(self) -> str:
        """Render the fault block stored in the record context."""
        return (
            f"Error Number: {self.code}, "
            f"Line: {_text(self.line)}, "
            f"State: {_text(self.state)}, "
            f"Severity: {_text(self.severity)}, "
            f"Procedure: {_text(self.procedure)}\n"
            f"Error Message: {self.message}"
        )


def _innermost(tb: TracebackType | None) -> TracebackType | None:
    while tb is not None and tb.tb_next is not None:
        tb = tb.tb_next
    return tb


def _exception_code(exc: BaseException) -> str:
    exc_type = type(exc)
    if exc_type.__module__ == "builtins":
        return exc_type.__qualname__
    return f"{exc_type.__module__}.{exc_type.__qualname__}"


def _errno(exc: BaseException) -> str | None:
    value = getattr(exc, "errno", None)
    return None if value is None else str(value)


def _text(value: object) -> str:
    # None renders empty, matching string concatenation of a missing value.
    return "" if value is None else str(value)
