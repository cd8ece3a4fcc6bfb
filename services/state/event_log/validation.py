"""Pydantic request-validation models for Event Log Service API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from services.state.event_log.domain import CALLER_NAME_MAX_LENGTH, Severity

STRICT_SEVERITY = "strict_severity"


class _ValidationModel(BaseModel):
    """Base request model with strict shape semantics."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class RecordEventRequest(_ValidationModel):
    """Validated shape of one logging call.

    Length limits mirror the storage columns so oversize values are rejected
    before any I/O. Severity membership is only enforced when the validation
    context sets ``strict_severity``.
    """

    caller_name: str | None = Field(default=None, max_length=CALLER_NAME_MAX_LENGTH)
    event_type: str = Field(min_length=1, max_length=50)
    severity: str = Field(min_length=1, max_length=20)
    message: str | None = None
    context: str | None = None

    @field_validator("severity")
    @classmethod
    def _validate_severity(cls, value: str, info: ValidationInfo) -> str:
        """Enforce the closed severity set when strict mode is requested."""
        strict = bool(info.context and info.context.get(STRICT_SEVERITY))
        if strict and value not in {member.value for member in Severity}:
            allowed = ", ".join(member.value for member in Severity)
            raise ValueError(f"{info.field_name} must be one of: {allowed}")
        return value


class LogIdRequest(_ValidationModel):
    """Validated request shape for reads keyed by record id."""

    log_id: int = Field(gt=0)


class ListRecordsRequest(_ValidationModel):
    """Validated request shape for newest-first list reads."""

    key: str = Field(min_length=1)
    limit: int = Field(default=100, gt=0, le=10_000)
