"""Structured logging context carried in a context variable.

Fields bound here (service name, the record being written, error codes) ride
along on every operational log line without being repeated at each call
site. A context variable keeps threads and asyncio tasks isolated.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Mapping

_LOG_CONTEXT: ContextVar[Mapping[str, str]] = ContextVar(
    "eventlog_log_context", default={}
)


def get_context() -> dict[str, str]:
    """Return a copy of the currently bound fields."""
    return dict(_LOG_CONTEXT.get())


def _merged(values: Mapping[str, object]) -> dict[str, str]:
    merged = dict(_LOG_CONTEXT.get())
    merged.update({str(k): str(v) for k, v in values.items() if v is not None})
    return merged


def bind_context(**values: object) -> None:
    """Bind fields for the rest of the current context; ``None`` is skipped."""
    if values:
        _LOG_CONTEXT.set(_merged(values))


def clear_context(*keys: str) -> None:
    """Drop the named fields, or every field when none are named."""
    if not keys:
        _LOG_CONTEXT.set({})
        return
    _LOG_CONTEXT.set({k: v for k, v in _LOG_CONTEXT.get().items() if k not in keys})


@contextmanager
def log_context(values: Mapping[str, object]) -> Iterator[None]:
    """Bind fields only for the duration of a ``with`` block."""
    token = _LOG_CONTEXT.set(_merged(values))
    try:
        yield
    finally:
        _LOG_CONTEXT.reset(token)
