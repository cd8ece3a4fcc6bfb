"""Factory helpers for building ``ErrorDetail`` values by category.

Each factory fixes the category and its default retry semantics; callers only
supply the message, a specific code and optional string metadata.
"""

from __future__ import annotations

from typing import Mapping

from . import codes
from .types import ErrorCategory, ErrorDetail


def _detail(
    category: ErrorCategory,
    message: str,
    *,
    code: str,
    retryable: bool = False,
    metadata: Mapping[str, object] | None = None,
) -> ErrorDetail:
    flattened = {} if metadata is None else {str(k): str(v) for k, v in metadata.items()}
    return ErrorDetail(
        code=code,
        message=message,
        category=category,
        retryable=retryable,
        metadata=flattened,
    )


def validation_error(
    message: str,
    *,
    code: str = codes.VALIDATION_ERROR,
    metadata: Mapping[str, object] | None = None,
) -> ErrorDetail:
    """Rejected input; never retryable."""
    return _detail(ErrorCategory.VALIDATION, message, code=code, metadata=metadata)


def not_found_error(
    message: str,
    *,
    code: str = codes.NOT_FOUND,
    metadata: Mapping[str, object] | None = None,
) -> ErrorDetail:
    return _detail(ErrorCategory.NOT_FOUND, message, code=code, metadata=metadata)


def conflict_error(
    message: str,
    *,
    code: str = codes.CONFLICT,
    metadata: Mapping[str, object] | None = None,
) -> ErrorDetail:
    """A write collided with stored state, such as a violated constraint."""
    return _detail(ErrorCategory.CONFLICT, message, code=code, metadata=metadata)


def dependency_error(
    message: str,
    *,
    code: str = codes.DEPENDENCY_FAILURE,
    retryable: bool = True,
    metadata: Mapping[str, object] | None = None,
) -> ErrorDetail:
    """The datastore or another collaborator failed.

    Retryable by default because most dependency failures are transient.
    """
    return _detail(
        ErrorCategory.DEPENDENCY,
        message,
        code=code,
        retryable=retryable,
        metadata=metadata,
    )


def internal_error(
    message: str,
    *,
    code: str = codes.INTERNAL_ERROR,
    metadata: Mapping[str, object] | None = None,
) -> ErrorDetail:
    return _detail(ErrorCategory.INTERNAL, message, code=code, metadata=metadata)
