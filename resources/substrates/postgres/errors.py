"""SQLAlchemy/DBAPI exception normalization helpers."""

from __future__ import annotations

from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    ProgrammingError,
    SQLAlchemyError,
)

from packages.eventlog_shared.errors import (
    ErrorDetail,
    codes,
    conflict_error,
    dependency_error,
    internal_error,
)


def normalize_postgres_error(exc: BaseException) -> ErrorDetail:
    """Map low-level DB exceptions into shared structured error semantics."""
    exc_type_name = type(exc).__name__
    message = str(exc)
    metadata = {"exception_type": exc_type_name}
    sqlstate = _sqlstate(exc)
    if sqlstate:
        metadata["sqlstate"] = sqlstate

    if (
        isinstance(exc, IntegrityError)
        or "UniqueViolation" in exc_type_name
        or "duplicate key value" in message
    ):
        return conflict_error(
            "event log constraint violated",
            code=codes.CONSTRAINT_VIOLATION,
            metadata=metadata,
        )

    if (
        isinstance(exc, OperationalError)
        or "OperationalError" in exc_type_name
        or "timeout" in message.lower()
    ):
        return dependency_error(
            "database unavailable",
            code=codes.DEPENDENCY_UNAVAILABLE,
            retryable=True,
            metadata=metadata,
        )

    if isinstance(exc, (InterfaceError, ProgrammingError)) or exc_type_name in {
        "InterfaceError",
        "ProgrammingError",
    }:
        return dependency_error(
            "database request failed",
            code=codes.DEPENDENCY_FAILURE,
            retryable=False,
            metadata=metadata,
        )

    if isinstance(exc, (DBAPIError, SQLAlchemyError)):
        return dependency_error(
            "database request failed",
            code=codes.DEPENDENCY_FAILURE,
            retryable=False,
            metadata=metadata,
        )

    return internal_error(
        "unexpected database failure",
        code=codes.UNEXPECTED_EXCEPTION,
        metadata=metadata,
    )


def _sqlstate(exc: BaseException) -> str | None:
    """Return the driver SQLSTATE for wrapped DBAPI errors when available."""
    original = getattr(exc, "orig", None) or exc
    for attribute in ("sqlstate", "pgcode"):
        value = getattr(original, attribute, None)
        if isinstance(value, str) and value:
            return value
    return None
