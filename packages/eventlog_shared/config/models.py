"""Typed runtime settings for event-log processes.

``RuntimeSettings`` holds the top-level sections. Component settings stay
untyped here and are validated by the owning component through
``resolve_component_settings`` so this package never imports services.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, ClassVar, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "eventlog" / "eventlog.yaml"
ENV_PREFIX = "EVENTLOG_"

_COMPONENT_KINDS = ("service", "substrate")


class LoggingSettings(BaseModel):
    """Operational stdout logging for the recorder process."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = True
    service: str = "eventlog"
    environment: str = "dev"


class ComponentNamespaceSettings(BaseModel):
    """Open mapping of ``<name> -> settings`` for one component kind."""

    model_config = ConfigDict(extra="allow")


class ComponentsSettings(BaseModel):
    """``components.service.*`` and ``components.substrate.*`` namespaces."""

    model_config = ConfigDict(extra="forbid")

    service: ComponentNamespaceSettings = Field(default_factory=ComponentNamespaceSettings)
    substrate: ComponentNamespaceSettings = Field(default_factory=ComponentNamespaceSettings)

    @model_validator(mode="before")
    @classmethod
    def _reject_flat_component_keys(cls, value: object) -> object:
        """Point ``components.service_event_log`` users at the nested form."""
        if isinstance(value, dict):
            for key in value:
                kind, _, name = str(key).partition("_")
                if name and kind in _COMPONENT_KINDS:
                    raise ValueError(
                        f"components.{key} is invalid; use components.{kind}.{name} instead"
                    )
        return value


class RuntimeSettings(BaseSettings):
    """Root settings; direct construction reads init, env, then YAML."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter="__",
        extra="ignore",
        nested_model_default_partial_update=True,
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    components: ComponentsSettings = Field(default_factory=ComponentsSettings)

    _config_path: ClassVar[Path] = DEFAULT_CONFIG_PATH

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        del dotenv_settings, file_secret_settings
        yaml_settings = YamlConfigSettingsSource(
            settings_cls,
            yaml_file=cls._config_path,
            yaml_file_encoding="utf-8",
        )
        return (init_settings, env_settings, yaml_settings)


TComponentSettings = TypeVar("TComponentSettings", bound=BaseModel)


def resolve_component_settings(
    *,
    settings: RuntimeSettings,
    component_id: str,
    model: type[TComponentSettings],
) -> TComponentSettings:
    """Validate one component's settings subtree with its own model.

    ``component_id`` is ``<kind>_<name>``: ``service_event_log`` reads
    ``components.service.event_log`` and a missing subtree validates as ``{}``.
    """
    kind, _, name = component_id.partition("_")
    if not name or kind not in _COMPONENT_KINDS:
        raise ValueError(f"unsupported component id: {component_id}")

    namespace: Any = getattr(settings.components, kind).model_dump(mode="python")
    subtree = namespace.get(name, {})
    if not isinstance(subtree, dict):
        raise TypeError(f"components.{kind}.{name} must resolve to an object mapping")
    return model.model_validate(subtree)
