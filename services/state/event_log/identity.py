"""Execution-context identity for principals and units of work.

Procedures declare themselves with the ``procedure`` decorator (or the
``procedure_scope`` context manager). Declared identities are visible to the
call-stack walk through their code objects and to the execution-context
fallback through a context variable, so both work across threads and asyncio
tasks.
"""

from __future__ import annotations

import functools
import getpass
import inspect
from collections.abc import Callable, Generator, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from types import CodeType, FrameType
from typing import Any, TypeVar, overload

from services.state.event_log.domain import CallerIdentity

F = TypeVar("F", bound=Callable[..., Any])

_CURRENT_UNITS: ContextVar[tuple[CallerIdentity, ...]] = ContextVar(
    "eventlog_current_units", default=()
)
_CURRENT_PRINCIPAL: ContextVar[str | None] = ContextVar(
    "eventlog_current_principal", default=None
)
_DECLARED_CODE: dict[CodeType, CallerIdentity] = {}

DEFAULT_PRINCIPAL = "unknown"


@overload
def procedure(func: F, /) -> F: ...


@overload
def procedure(
    *, schema: str | None = None, name: str | None = None
) -> Callable[[F], F]: ...


def procedure(
    func: Callable[..., Any] | None = None,
    /,
    *,
    schema: str | None = None,
    name: str | None = None,
) -> Any:
    """Declare a callable as a procedure with a ``schema.objectName`` identity.

    ``schema`` defaults to the defining module and ``name`` to the callable's
    qualified name. Usable bare (``@procedure``) or with arguments.

    The unit stays bound for the whole body of coroutine functions and for
    each resumption of generator functions, but not while a suspended
    generator is waiting in its consumer. Async generator functions are only
    bound while the generator object is created.
    """

    def decorator(target: F) -> F:
        identity = CallerIdentity(
            schema_name=schema or target.__module__,
            object_name=name or target.__qualname__,
        )
        _DECLARED_CODE[target.__code__] = identity

        if inspect.iscoroutinefunction(target):

            @functools.wraps(target)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with _unit_scope(identity):
                    return await target(*args, **kwargs)

            return async_wrapper  # type: ignore[return-value]

        if inspect.isgeneratorfunction(target):

            @functools.wraps(target)
            def generator_wrapper(*args: Any, **kwargs: Any) -> Any:
                return (yield from _scoped_steps(identity, target(*args, **kwargs)))

            return generator_wrapper  # type: ignore[return-value]

        @functools.wraps(target)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with _unit_scope(identity):
                return target(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    if func is not None:
        return decorator(func)
    return decorator


@contextmanager
def procedure_scope(schema: str, name: str) -> Iterator[CallerIdentity]:
    """Bind a unit-of-work identity to the current execution context."""
    identity = CallerIdentity(schema_name=schema, object_name=name)
    with _unit_scope(identity):
        yield identity


@contextmanager
def principal_scope(principal: str) -> Iterator[None]:
    """Bind the principal recorded as ``actor`` for the duration of a block."""
    token = _CURRENT_PRINCIPAL.set(principal)
    try:
        yield
    finally:
        _CURRENT_PRINCIPAL.reset(token)


@contextmanager
def _unit_scope(identity: CallerIdentity) -> Iterator[None]:
    token = _CURRENT_UNITS.set((*_CURRENT_UNITS.get(), identity))
    try:
        yield
    finally:
        _CURRENT_UNITS.reset(token)


def _scoped_steps(
    identity: CallerIdentity, inner: Generator[Any, Any, Any]
) -> Generator[Any, Any, Any]:
    """Drive ``inner`` with ``identity`` bound only while its body runs."""
    sent: Any = None
    thrown: BaseException | None = None
    while True:
        with _unit_scope(identity):
            try:
                item = inner.send(sent) if thrown is None else inner.throw(thrown)
            except StopIteration as stop:
                return stop.value
        sent, thrown = None, None
        try:
            sent = yield item
        except GeneratorExit:
            inner.close()
            raise
        except BaseException as exc:  # noqa: BLE001
            thrown = exc


def declared_identity(code: CodeType) -> CallerIdentity | None:
    """Return the identity declared for a code object via ``procedure``."""
    return _DECLARED_CODE.get(code)


def is_anonymous_code(code: CodeType) -> bool:
    """Return whether ``code`` is a lambda, comprehension or generator expression.

    Module-level code is not anonymous: it is the outermost caller and has no
    enclosing function to attribute to.
    """
    return (
        code.co_name.startswith("<")
        and code.co_name != "<module>"
        and declared_identity(code) is None
    )


def frame_identity(frame: FrameType) -> CallerIdentity | None:
    """Return the procedure identity of one stack frame.

    Module-level code (including ``exec``/``eval`` strings and interactive
    input) and other anonymous code such as lambdas and comprehensions is not
    a procedure and yields ``None``.
    """
    code = frame.f_code
    declared = declared_identity(code)
    if declared is not None:
        return declared
    if code.co_name.startswith("<"):
        return None
    module = frame.f_globals.get("__name__")
    if not isinstance(module, str) or module == "":
        return None
    return CallerIdentity(schema_name=module, object_name=code.co_qualname)


class ContextIdentityProvider:
    """Identity provider backed by context variables and the OS login name."""

    def __init__(self, *, default_principal: str | None = None) -> None:
        self._default_principal = default_principal

    def current_principal(self) -> str:
        """Return the bound principal, else the configured or OS login name."""
        bound = _CURRENT_PRINCIPAL.get()
        if bound:
            return bound
        if self._default_principal:
            return self._default_principal
        try:
            return getpass.getuser()
        except (KeyError, OSError):
            return DEFAULT_PRINCIPAL

    def current_unit(self) -> CallerIdentity | None:
        """Return the innermost bound unit of work, if any."""
        units = _CURRENT_UNITS.get()
        if not units:
            return None
        return units[-1]
