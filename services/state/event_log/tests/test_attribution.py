"""Tests for caller attribution strategies and their ordered fallback."""

from __future__ import annotations

import pytest

from services.state.event_log.attribution import (
    CONTEXT_NOTE,
    AttributionResolver,
    CurrentUnitResolver,
    StackWalkResolver,
    is_usable_caller_name,
)
from services.state.event_log.domain import UNKNOWN_CALLER, Attribution
from services.state.event_log.identity import ContextIdentityProvider, procedure_scope


class _FixedResolver:
    """Strategy double returning a fixed answer and counting calls."""

    def __init__(self, result: Attribution | None) -> None:
        self.result = result
        self.calls = 0

    def resolve(self) -> Attribution | None:
        self.calls += 1
        return self.result


class _ExplodingResolver:
    def resolve(self) -> Attribution | None:
        raise RuntimeError("introspection unavailable")


def _compile_function(module_name: str, source: str, name: str, **names: object):
    namespace: dict[str, object] = {"__name__": module_name, **names}
    exec(compile(source, f"<{module_name}>", "exec"), namespace)
    return namespace[name]


@pytest.mark.parametrize(
    ("name", "usable"),
    [
        ("dbo.ImportData", True),
        ("app.jobs.Importer.run", True),
        (None, False),
        ("", False),
        ("   ", False),
        ("Unknown", False),
        (".", False),
        ("dbo.", False),
        (".ImportData", False),
        ("ImportData", False),
    ],
)
def test_is_usable_caller_name(name: str | None, usable: bool) -> None:
    """Only well-formed ``schema.objectName`` values count as resolved."""
    assert is_usable_caller_name(name) is usable


def test_explicit_caller_wins_regardless_of_auto_detect() -> None:
    """An explicit name is returned verbatim and strategies are never run."""
    strategy = _FixedResolver(Attribution(caller_name="dbo.Other", note="n"))
    resolver = AttributionResolver(strategies=[strategy])

    detected = resolver.resolve("dbo.Explicit", auto_detect=True)
    disabled = resolver.resolve("dbo.Explicit", auto_detect=False)

    assert detected == Attribution(caller_name="dbo.Explicit")
    assert disabled == Attribution(caller_name="dbo.Explicit")
    assert strategy.calls == 0


def test_disabled_auto_detect_without_name_yields_sentinel() -> None:
    """With detection off and no name, the record is attributed to Unknown."""
    strategy = _FixedResolver(Attribution(caller_name="dbo.Other", note="n"))
    resolver = AttributionResolver(strategies=[strategy])

    result = resolver.resolve(None, auto_detect=False)

    assert result == Attribution(caller_name=UNKNOWN_CALLER)
    assert strategy.calls == 0


def test_empty_explicit_name_triggers_detection() -> None:
    """An empty explicit name is treated like no name at all."""
    primary = _FixedResolver(
        Attribution(caller_name="dbo.Primary", note="primary", strategy="call_stack")
    )
    resolver = AttributionResolver(strategies=[primary])

    assert resolver.resolve("", auto_detect=True).caller_name == "dbo.Primary"


def test_primary_strategy_takes_precedence() -> None:
    """The secondary strategy is not consulted when the primary succeeds."""
    primary = _FixedResolver(Attribution(caller_name="dbo.Primary", note="primary"))
    secondary = _FixedResolver(Attribution(caller_name="dbo.Secondary", note="secondary"))
    resolver = AttributionResolver(strategies=[primary, secondary])

    result = resolver.resolve(None, auto_detect=True)

    assert result.caller_name == "dbo.Primary"
    assert result.note == "primary"
    assert secondary.calls == 0


@pytest.mark.parametrize(
    "primary_result",
    [
        None,
        Attribution(caller_name="", note="primary"),
        Attribution(caller_name=".", note="primary"),
        Attribution(caller_name=UNKNOWN_CALLER, note="primary"),
    ],
)
def test_secondary_strategy_used_when_primary_is_unusable(
    primary_result: Attribution | None,
) -> None:
    """Null, empty, sentinel or malformed primary results fall through."""
    primary = _FixedResolver(primary_result)
    secondary = _FixedResolver(Attribution(caller_name="dbo.Secondary", note="secondary"))
    resolver = AttributionResolver(strategies=[primary, secondary])

    result = resolver.resolve(None, auto_detect=True)

    assert result.caller_name == "dbo.Secondary"
    assert result.note == "secondary"


def test_failing_strategy_degrades_to_next_then_sentinel() -> None:
    """Strategy exceptions are never surfaced to the logging caller."""
    resolver = AttributionResolver(
        strategies=[_ExplodingResolver(), _FixedResolver(None)]
    )

    result = resolver.resolve(None, auto_detect=True)

    assert result == Attribution(caller_name=UNKNOWN_CALLER)


def test_stack_walk_attributes_direct_caller_at_level_two() -> None:
    """Without internal frames configured, the caller of resolve() is level 2."""
    result = StackWalkResolver().resolve()

    assert result is not None
    assert result.caller_name == (
        f"{__name__}.test_stack_walk_attributes_direct_caller_at_level_two"
    )
    assert result.note == "Auto-detected from call stack at level 2"
    assert result.strategy == "call_stack"


def test_stack_walk_skips_internal_modules() -> None:
    """Frames from internal modules are stepped over entirely."""
    resolver = StackWalkResolver(internal_modules={"vendor.logging_facade"})
    facade = _compile_function(
        "vendor.logging_facade",
        "def log_event():\n    return resolver.resolve()\n",
        "log_event",
        resolver=resolver,
    )

    result = facade()

    assert result is not None
    assert result.caller_name == f"{__name__}.test_stack_walk_skips_internal_modules"
    assert result.note == "Auto-detected from call stack at level 2"


def test_stack_walk_counts_skipped_prefix_frames() -> None:
    """Configured wrapper modules are skipped but still add to the level."""
    resolver = StackWalkResolver(skip_module_prefixes=["vendor"])
    wrapper = _compile_function(
        "vendor.wrappers",
        "def log_via_wrapper():\n    return resolver.resolve()\n",
        "log_via_wrapper",
        resolver=resolver,
    )

    result = wrapper()

    assert result is not None
    assert result.caller_name == f"{__name__}.test_stack_walk_counts_skipped_prefix_frames"
    assert result.note == "Auto-detected from call stack at level 3"


def test_stack_walk_reports_wrapper_when_not_skipped() -> None:
    """Without skip prefixes the wrapper itself is the direct caller."""
    resolver = StackWalkResolver()
    wrapper = _compile_function(
        "vendor.wrappers",
        "def log_via_wrapper():\n    return resolver.resolve()\n",
        "log_via_wrapper",
        resolver=resolver,
    )

    result = wrapper()

    assert result is not None
    assert result.caller_name == "vendor.wrappers.log_via_wrapper"


def test_stack_walk_returns_none_for_module_level_code() -> None:
    """Top-level script code has no procedure identity."""
    resolver = StackWalkResolver()
    namespace: dict[str, object] = {"__name__": "scripts.nightly", "resolver": resolver}

    exec("result = resolver.resolve()", namespace)

    assert namespace["result"] is None


def test_current_unit_resolver_reads_bound_scope() -> None:
    """The execution-context strategy names the innermost bound unit."""
    resolver = CurrentUnitResolver(ContextIdentityProvider())

    assert resolver.resolve() is None
    with procedure_scope("dbo", "Outer"):
        with procedure_scope("dbo", "Inner"):
            inner = resolver.resolve()
        outer = resolver.resolve()

    assert inner == Attribution(
        caller_name="dbo.Inner", note=CONTEXT_NOTE, strategy="execution_context"
    )
    assert outer is not None and outer.caller_name == "dbo.Outer"


def test_stack_walk_steps_over_generator_expression_frames() -> None:
    """Anonymous frames are counted but attributed to the enclosing function."""
    resolver = StackWalkResolver()

    results = list(resolver.resolve() for _ in range(1))

    assert results[0] == Attribution(
        caller_name=f"{__name__}.test_stack_walk_steps_over_generator_expression_frames",
        note="Auto-detected from call stack at level 3",
        strategy="call_stack",
    )


def test_stack_walk_steps_over_lambda_frames() -> None:
    resolver = StackWalkResolver()
    call = lambda: resolver.resolve()  # noqa: E731

    result = call()

    assert result is not None
    assert result.caller_name == f"{__name__}.test_stack_walk_steps_over_lambda_frames"


def test_current_unit_resolver_falls_back_to_entry_point_frame() -> None:
    """With no bound unit the outermost entry-point frame is the executing unit."""
    resolver = CurrentUnitResolver(
        ContextIdentityProvider(),
        entry_point_modules={"vendor.logging_facade"},
    )
    log_event = _compile_function(
        "vendor.logging_facade",
        "def log_event():\n    return resolver.resolve()\n",
        "log_event",
        resolver=resolver,
    )

    result = log_event()

    assert result == Attribution(
        caller_name="vendor.logging_facade.log_event",
        note=CONTEXT_NOTE,
        strategy="execution_context",
    )
    with procedure_scope("dbo", "Bound"):
        assert log_event().caller_name == "dbo.Bound"
