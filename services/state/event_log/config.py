"""Pydantic settings for Event Log Service behavior."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from packages.eventlog_shared.config import RuntimeSettings, resolve_component_settings

SERVICE_COMPONENT_ID = "service_event_log"


class EventLogSettings(BaseModel):
    """Event Log Service runtime behavior settings.

    ``durability`` selects how a write relates to the caller's transaction:
    ``ambient`` joins a caller-supplied session (the row rolls back with it),
    ``independent`` always commits in the recorder's own transaction.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    auto_detect_caller: bool = True
    strict_severity: bool = False
    skip_module_prefixes: tuple[str, ...] = Field(default_factory=tuple)
    durability: Literal["ambient", "independent"] = "ambient"
    default_principal: str | None = None

    @field_validator("skip_module_prefixes", mode="before")
    @classmethod
    def _split_prefixes(cls, value: object) -> object:
        """Accept a comma-separated string from env sources."""
        if isinstance(value, str):
            return tuple(part.strip() for part in value.split(",") if part.strip())
        return value


def resolve_event_log_settings(settings: RuntimeSettings) -> EventLogSettings:
    """Resolve service settings from ``components.service.event_log``."""
    return resolve_component_settings(
        settings=settings,
        component_id=SERVICE_COMPONENT_ID,
        model=EventLogSettings,
    )
