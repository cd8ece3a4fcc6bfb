"""Generic exception normalization for the shared error taxonomy."""

from __future__ import annotations

from collections.abc import Callable

from . import codes
from .factories import dependency_error, internal_error, not_found_error, validation_error
from .types import ErrorDetail

# First match wins, so subclasses must precede their bases.
_RULES: tuple[tuple[tuple[type[BaseException], ...], Callable[..., ErrorDetail], str, str], ...] = (
    ((ValueError, TypeError), validation_error, codes.INVALID_ARGUMENT, "invalid argument"),
    ((LookupError, FileNotFoundError), not_found_error, codes.RESOURCE_NOT_FOUND, "not found"),
    ((TimeoutError,), dependency_error, codes.DEPENDENCY_TIMEOUT, "dependency timeout"),
    ((ConnectionError,), dependency_error, codes.DEPENDENCY_UNAVAILABLE, "dependency unavailable"),
)


def exception_to_error(exc: BaseException) -> ErrorDetail:
    """Map an arbitrary exception onto an ``ErrorDetail`` by its type.

    Database exceptions should go through
    ``resources.substrates.postgres.errors.normalize_postgres_error`` first;
    anything unmatched here is an internal error.
    """
    metadata = {"exception_type": type(exc).__name__}
    for types, factory, code, fallback in _RULES:
        if isinstance(exc, types):
            return factory(str(exc) or fallback, code=code, metadata=metadata)
    return internal_error(
        str(exc) or "unexpected exception",
        code=codes.UNEXPECTED_EXCEPTION,
        metadata=metadata,
    )
