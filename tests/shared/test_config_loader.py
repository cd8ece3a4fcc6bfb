"""Tests for pydantic-settings-backed shared configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from packages.eventlog_shared.config import (
    RuntimeSettings,
    load_config,
    load_settings,
    resolve_component_settings,
)
from resources.substrates.postgres.config import PostgresSettings
from services.state.event_log.config import SERVICE_COMPONENT_ID, EventLogSettings


def test_load_settings_uses_eventlog_precedence_cascade(tmp_path: Path) -> None:
    """Init params should override env, env should override YAML, then defaults."""
    config_file = tmp_path / "eventlog.yaml"
    config_file.write_text(
        "\n".join(
            [
                "logging:",
                "  level: WARNING",
                "  environment: staging",
                "components:",
                "  substrate:",
                "    postgres:",
                "      pool_size: 7",
                "      max_overflow: 2",
            ]
        ),
        encoding="utf-8",
    )

    settings = load_settings(
        cli_params={"logging": {"level": "DEBUG"}},
        environ={
            "EVENTLOG_LOGGING__LEVEL": "ERROR",
            "EVENTLOG_COMPONENTS__SUBSTRATE__POSTGRES__POOL_SIZE": "9",
            "EVENTLOG_COMPONENTS__SERVICE__EVENT_LOG__STRICT_SEVERITY": "true",
        },
        config_path=config_file,
    )

    postgres = resolve_component_settings(
        settings=settings,
        component_id="substrate_postgres",
        model=PostgresSettings,
    )
    event_log = resolve_component_settings(
        settings=settings,
        component_id=SERVICE_COMPONENT_ID,
        model=EventLogSettings,
    )

    assert settings.logging.level == "DEBUG"
    assert settings.logging.environment == "staging"
    assert postgres.pool_size == 9
    assert postgres.max_overflow == 2
    assert event_log.strict_severity is True
    assert event_log.auto_detect_caller is True


def test_load_settings_uses_model_defaults_when_sources_missing(tmp_path: Path) -> None:
    """Settings should fall back to built-in defaults when env and YAML are absent."""
    settings = load_settings(config_path=tmp_path / "eventlog.yaml", environ={})
    postgres = resolve_component_settings(
        settings=settings,
        component_id="substrate_postgres",
        model=PostgresSettings,
    )

    assert settings.logging.service == "eventlog"
    assert settings.logging.level == "INFO"
    assert settings.logging.json_output is True
    assert postgres.pool_size == 5
    assert postgres.sslmode == "prefer"


def test_load_config_coerces_env_scalars(tmp_path: Path) -> None:
    merged = load_config(
        environ={
            "EVENTLOG_LOGGING__JSON_OUTPUT": "false",
            "EVENTLOG_COMPONENTS__SUBSTRATE__POSTGRES__POOL_TIMEOUT_SECONDS": "2.5",
            "EVENTLOG_COMPONENTS__SERVICE__EVENT_LOG__SKIP_MODULE_PREFIXES": '["a", "b"]',
            "UNRELATED": "ignored",
        },
        config_path=tmp_path / "eventlog.yaml",
        defaults={},
    )

    assert merged == {
        "logging": {"json_output": False},
        "components": {
            "substrate": {"postgres": {"pool_timeout_seconds": 2.5}},
            "service": {"event_log": {"skip_module_prefixes": ["a", "b"]}},
        },
    }


def test_load_config_rejects_non_mapping_yaml(tmp_path: Path) -> None:
    config_file = tmp_path / "eventlog.yaml"
    config_file.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError, match="top-level mapping"):
        load_config(config_path=config_file, environ={})


def test_flat_component_keys_are_rejected(tmp_path: Path) -> None:
    """Component settings must be grouped by kind."""
    with pytest.raises(ValidationError, match="components.service.event_log"):
        load_settings(
            cli_params={"components": {"service_event_log": {"durability": "ambient"}}},
            environ={},
            config_path=tmp_path / "eventlog.yaml",
        )


def test_unsupported_component_id_is_rejected() -> None:
    settings = RuntimeSettings.model_validate({})

    with pytest.raises(ValueError, match="unsupported component id"):
        resolve_component_settings(
            settings=settings,
            component_id="adapter_smtp",
            model=EventLogSettings,
        )


def test_runtime_settings_reads_prefixed_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    """Direct construction should read ``EVENTLOG_`` variables with nesting."""
    monkeypatch.setattr(RuntimeSettings, "_config_path", tmp_path / "eventlog.yaml")
    monkeypatch.setenv("EVENTLOG_LOGGING__LEVEL", "WARNING")
    monkeypatch.setenv("EVENTLOG_LOGGING__SERVICE", "etl-worker")

    settings = RuntimeSettings()

    assert settings.logging.level == "WARNING"
    assert settings.logging.service == "etl-worker"
    assert settings.logging.json_output is True
