"""Caller attribution for event-log records.

Attribution runs an ordered list of ``CallerResolver`` strategies and keeps
the first usable ``schema.objectName``. The default order is the call-stack
walk followed by the currently executing unit (a bound procedure, else the
logging entry point itself); if neither yields a usable name the record is attributed to ``"Unknown"``.
"""

from __future__ import annotations

import inspect
from collections.abc import Iterable, Sequence
from types import FrameType
from typing import Protocol

from packages.eventlog_shared.logging import get_logger
from services.state.event_log.domain import UNKNOWN_CALLER, Attribution, CallerIdentity
from services.state.event_log.identity import frame_identity, is_anonymous_code
from services.state.event_log.interfaces import IdentityProvider

_LOGGER = get_logger(__name__)

STACK_STRATEGY = "call_stack"
CONTEXT_STRATEGY = "execution_context"

STACK_NOTE_TEMPLATE = "Auto-detected from call stack at level {level}"
CONTEXT_NOTE = "Detected using current execution context"


class CallerResolver(Protocol):
    """One strategy for naming the unit of work that issued a logging call."""

    def resolve(self) -> Attribution | None:
        """Return an attribution, or ``None`` when this strategy has no answer."""


def is_usable_caller_name(name: str | None) -> bool:
    """Return whether ``name`` is a well-formed ``schema.objectName``."""
    if name is None:
        return False
    stripped = name.strip()
    if stripped == "" or stripped == UNKNOWN_CALLER:
        return False
    schema, separator, object_name = stripped.partition(".")
    return separator != "" and schema.strip() != "" and object_name.strip() != ""


class StackWalkResolver:
    """Attribute the direct caller of the logging entry point via stack frames.

    Frames from ``internal_modules`` (the recorder, its facades and this
    module) are skipped. The outermost of those is reported as level 1 and
    each frame beyond it adds one, so a direct caller sits at level 2. Frames
    from ``skip_module_prefixes`` and anonymous frames (lambdas, generator
    expressions, comprehensions) are stepped over but still counted, so a
    call made inside ``list(... for ...)`` is attributed to the enclosing
    function.
    """

    def __init__(
        self,
        *,
        internal_modules: Iterable[str] = (),
        skip_module_prefixes: Sequence[str] = (),
    ) -> None:
        self._internal_modules = frozenset({__name__, *internal_modules})
        self._skip_module_prefixes = tuple(skip_module_prefixes)

    def resolve(self) -> Attribution | None:
        frame = inspect.currentframe()
        if frame is None:
            return None
        try:
            while frame is not None and _module_of(frame) in self._internal_modules:
                frame = frame.f_back

            level = 2
            while frame is not None and (
                self._is_skipped(_module_of(frame)) or is_anonymous_code(frame.f_code)
            ):
                frame = frame.f_back
                level += 1

            if frame is None:
                return None
            identity = frame_identity(frame)
            if identity is None:
                return None
            return Attribution(
                caller_name=identity.qualified_name,
                note=STACK_NOTE_TEMPLATE.format(level=level),
                strategy=STACK_STRATEGY,
            )
        finally:
            del frame

    def _is_skipped(self, module: str) -> bool:
        return any(
            module == prefix or module.startswith(f"{prefix}.")
            for prefix in self._skip_module_prefixes
        )


class CurrentUnitResolver:
    """Attribute the unit of work that is currently executing.

    The innermost unit bound through ``procedure`` or ``procedure_scope``
    wins. Without one, the logging entry point itself is the executing unit:
    the outermost frame from ``entry_point_modules`` reached by walking out
    from this resolver, e.g. ``DefaultEventLogService.info``.
    """

    def __init__(
        self,
        identity_provider: IdentityProvider,
        *,
        entry_point_modules: Iterable[str] = (),
    ) -> None:
        self._identity_provider = identity_provider
        self._entry_point_modules = frozenset(entry_point_modules)

    def resolve(self) -> Attribution | None:
        unit = self._identity_provider.current_unit()
        if unit is None:
            unit = self._entry_point()
        if unit is None:
            return None
        return Attribution(
            caller_name=unit.qualified_name,
            note=CONTEXT_NOTE,
            strategy=CONTEXT_STRATEGY,
        )

    def _entry_point(self) -> CallerIdentity | None:
        if not self._entry_point_modules:
            return None
        frame = inspect.currentframe()
        entry: FrameType | None = None
        try:
            while frame is not None and _module_of(frame) == __name__:
                frame = frame.f_back
            while frame is not None and _module_of(frame) in self._entry_point_modules:
                entry = frame
                frame = frame.f_back
            return None if entry is None else frame_identity(entry)
        finally:
            del frame, entry


def _module_of(frame: FrameType) -> str:
    module = frame.f_globals.get("__name__")
    return module if isinstance(module, str) else ""


class AttributionResolver:
    """Compose caller strategies with ordered fallback."""

    def __init__(self, strategies: Sequence[CallerResolver]) -> None:
        self._strategies = tuple(strategies)

    def resolve(self, explicit_caller: str | None, *, auto_detect: bool) -> Attribution:
        """Resolve the effective caller name for one logging call.

        An explicit non-empty name always wins and disabling auto-detection
        skips the strategies; neither case adds a note.
        """
        if explicit_caller or not auto_detect:
            return Attribution(caller_name=explicit_caller or UNKNOWN_CALLER)

        for strategy in self._strategies:
            try:
                attribution = strategy.resolve()
            except Exception as exc:  # noqa: BLE001
                _LOGGER.warning(
                    "caller strategy failed: strategy=%s exception_type=%s",
                    type(strategy).__name__,
                    type(exc).__name__,
                    exc_info=exc,
                )
                continue
            if attribution is not None and is_usable_caller_name(attribution.caller_name):
                return attribution

        _LOGGER.debug("caller attribution failed; using sentinel")
        return Attribution(caller_name=UNKNOWN_CALLER)
