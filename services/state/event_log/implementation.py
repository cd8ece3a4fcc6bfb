"""Concrete Event Log Service implementation."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from packages.eventlog_shared.errors import ErrorDetail, codes, validation_error
from packages.eventlog_shared.logging import fields, get_logger, log_context
from resources.substrates.postgres.errors import normalize_postgres_error
from services.state.event_log import attribution as attribution_module
from services.state.event_log import identity as identity_module
from services.state.event_log import service as service_module
from services.state.event_log.attribution import (
    AttributionResolver,
    CurrentUnitResolver,
    StackWalkResolver,
)
from services.state.event_log.composition import (
    CALLER_INFO_LABEL,
    ERROR_DETAILS_LABEL,
    RecordContext,
)
from services.state.event_log.config import EventLogSettings
from services.state.event_log.domain import (
    ACTOR_MAX_LENGTH,
    CALLER_NAME_MAX_LENGTH,
    LogRecord,
    Severity,
)
from services.state.event_log.errors import EventLogStorageError, EventLogValidationError
from services.state.event_log.faults import FaultContext
from services.state.event_log.identity import ContextIdentityProvider
from services.state.event_log.interfaces import EventLogRepository, IdentityProvider
from services.state.event_log.service import EventLogService
from services.state.event_log.validation import (
    STRICT_SEVERITY,
    ListRecordsRequest,
    LogIdRequest,
    RecordEventRequest,
)

_LOGGER = get_logger(__name__)

_INTERNAL_MODULES = frozenset(
    {
        __name__,
        attribution_module.__name__,
        identity_module.__name__,
        service_module.__name__,
    }
)


class DefaultEventLogService(EventLogService):
    """Synchronous recorder writing one row per call to the event-log store."""

    def __init__(
        self,
        *,
        settings: EventLogSettings,
        repository: EventLogRepository,
        identity_provider: IdentityProvider | None = None,
        attribution: AttributionResolver | None = None,
    ) -> None:
        self._settings = settings
        self._repository = repository
        self._identity = identity_provider or ContextIdentityProvider(
            default_principal=settings.default_principal
        )
        self._attribution = attribution or AttributionResolver(
            strategies=(
                StackWalkResolver(
                    internal_modules=_INTERNAL_MODULES,
                    skip_module_prefixes=settings.skip_module_prefixes,
                ),
                CurrentUnitResolver(
                    self._identity,
                    entry_point_modules=_INTERNAL_MODULES,
                ),
            )
        )

    def record(
        self,
        caller_name: str | None = None,
        *,
        event_type: str,
        severity: str,
        message: str | None = None,
        context: str | None = None,
        auto_detect_caller: bool | None = None,
        session: Session | None = None,
    ) -> int:
        """Append one record with an arbitrary severity string."""
        return self._record(
            caller_name=caller_name,
            event_type=event_type,
            severity=severity,
            message=message,
            context=RecordContext.from_text(context),
            raw_context=context,
            auto_detect_caller=auto_detect_caller,
            session=session,
        )

    def trace(
        self,
        caller_name: str | None = None,
        *,
        event_type: str,
        message: str | None = None,
        context: str | None = None,
        auto_detect_caller: bool | None = None,
        session: Session | None = None,
    ) -> int:
        """Append one ``TRACE`` record."""
        return self._record(
            caller_name=caller_name,
            event_type=event_type,
            severity=Severity.TRACE.value,
            message=message,
            context=RecordContext.from_text(context),
            raw_context=context,
            auto_detect_caller=auto_detect_caller,
            session=session,
        )

    def info(
        self,
        caller_name: str | None = None,
        *,
        event_type: str,
        message: str | None = None,
        context: str | None = None,
        auto_detect_caller: bool | None = None,
        session: Session | None = None,
    ) -> int:
        """Append one ``INFO`` record."""
        return self._record(
            caller_name=caller_name,
            event_type=event_type,
            severity=Severity.INFO.value,
            message=message,
            context=RecordContext.from_text(context),
            raw_context=context,
            auto_detect_caller=auto_detect_caller,
            session=session,
        )

    def warn(
        self,
        caller_name: str | None = None,
        *,
        event_type: str,
        message: str | None = None,
        context: str | None = None,
        auto_detect_caller: bool | None = None,
        session: Session | None = None,
    ) -> int:
        """Append one ``WARN`` record."""
        return self._record(
            caller_name=caller_name,
            event_type=event_type,
            severity=Severity.WARN.value,
            message=message,
            context=RecordContext.from_text(context),
            raw_context=context,
            auto_detect_caller=auto_detect_caller,
            session=session,
        )

    def error(
        self,
        caller_name: str | None = None,
        *,
        event_type: str,
        message: str | None = None,
        context: str | None = None,
        include_fault_details: bool = True,
        fault: FaultContext | BaseException | None = None,
        auto_detect_caller: bool | None = None,
        session: Session | None = None,
    ) -> int:
        """Append one ``ERROR`` record.

        With ``include_fault_details`` the explicit ``fault`` (or, when none
        is given, the exception currently being handled) is rendered into the
        context: after the caller's context under an ``Error Details`` label,
        or as the whole context when the caller supplied none.
        """
        composed = RecordContext.from_text(context)
        if include_fault_details:
            active = _resolve_fault(fault)
            if active is not None:
                composed = composed.append(
                    active.render(),
                    label=ERROR_DETAILS_LABEL,
                    label_when_leading=False,
                )
        return self._record(
            caller_name=caller_name,
            event_type=event_type,
            severity=Severity.ERROR.value,
            message=message,
            context=composed,
            raw_context=context,
            auto_detect_caller=auto_detect_caller,
            session=session,
        )

    def get(self, log_id: int) -> LogRecord | None:
        """Read one record by id."""
        request = self._validate(LogIdRequest, {"log_id": log_id})
        try:
            return self._repository.get(log_id=request.log_id)
        except Exception as exc:  # noqa: BLE001
            raise self._storage_failure(operation="get", exc=exc) from exc

    def list_by_severity(self, severity: str, *, limit: int = 100) -> list[LogRecord]:
        """Read the newest records with one severity."""
        request = self._validate(ListRecordsRequest, {"key": severity, "limit": limit})
        try:
            return self._repository.list_by_severity(
                severity=request.key, limit=request.limit
            )
        except Exception as exc:  # noqa: BLE001
            raise self._storage_failure(operation="list_by_severity", exc=exc) from exc

    def list_by_caller(self, caller_name: str, *, limit: int = 100) -> list[LogRecord]:
        """Read the newest records attributed to one caller."""
        request = self._validate(ListRecordsRequest, {"key": caller_name, "limit": limit})
        try:
            return self._repository.list_by_caller(
                caller_name=request.key, limit=request.limit
            )
        except Exception as exc:  # noqa: BLE001
            raise self._storage_failure(operation="list_by_caller", exc=exc) from exc

    def _record(
        self,
        *,
        caller_name: str | None,
        event_type: str,
        severity: str,
        message: str | None,
        context: RecordContext,
        raw_context: str | None,
        auto_detect_caller: bool | None,
        session: Session | None,
    ) -> int:
        request = self._validate(
            RecordEventRequest,
            {
                "caller_name": caller_name,
                "event_type": event_type,
                "severity": severity,
                "message": message,
                "context": raw_context,
            },
            validation_context={STRICT_SEVERITY: self._settings.strict_severity},
        )

        auto_detect = (
            self._settings.auto_detect_caller
            if auto_detect_caller is None
            else auto_detect_caller
        )
        attribution = self._attribution.resolve(request.caller_name, auto_detect=auto_detect)
        if attribution.note is not None:
            context = context.append(attribution.note, label=CALLER_INFO_LABEL)

        target_session = None if self._settings.durability == "independent" else session
        # Resolved names are clipped to their column widths, never rejected.
        caller_name = attribution.caller_name[:CALLER_NAME_MAX_LENGTH]
        actor = self._identity.current_principal()[:ACTOR_MAX_LENGTH]
        log_fields = {
            fields.PROCEDURE_NAME: caller_name,
            fields.EVENT_TYPE: request.event_type,
            fields.SEVERITY: request.severity,
            fields.ACTOR: actor,
            fields.ATTRIBUTION: attribution.strategy,
            fields.DURABILITY: "ambient" if target_session is not None else "independent",
        }
        with log_context(log_fields):
            try:
                log_id = self._repository.insert(
                    caller_name=caller_name,
                    event_type=request.event_type,
                    severity=request.severity,
                    message=request.message,
                    actor=actor,
                    context=context.serialize(),
                    session=target_session,
                )
            except Exception as exc:  # noqa: BLE001
                raise self._storage_failure(operation="record", exc=exc) from exc
            with log_context({fields.LOG_ID: log_id}):
                _LOGGER.debug("event recorded")
        return log_id

    def _validate(
        self,
        model: type[BaseModel],
        payload: dict[str, Any],
        *,
        validation_context: dict[str, Any] | None = None,
    ) -> Any:
        """Validate one request payload or raise ``EventLogValidationError``."""
        try:
            return model.model_validate(payload, context=validation_context)
        except ValidationError as exc:
            errors = exc.errors()
            first = errors[0]
            field = ".".join(str(part) for part in first["loc"])
            code = codes.INVALID_SEVERITY if field == "severity" else codes.INVALID_ARGUMENT
            raise EventLogValidationError(
                validation_error(
                    f"request validation failed: {first['msg']}",
                    code=code,
                    metadata={"field": field, "error_count": str(len(errors))},
                )
            ) from exc

    def _storage_failure(self, *, operation: str, exc: Exception) -> EventLogStorageError:
        """Normalize one storage exception and log it before it is raised."""
        detail: ErrorDetail = normalize_postgres_error(exc)
        with log_context(
            {
                fields.ERROR_CODE: detail.code,
                fields.ERROR_CATEGORY: detail.category.value,
                fields.EXCEPTION_TYPE: type(exc).__name__,
            }
        ):
            _LOGGER.warning("%s failed due to storage error", operation, exc_info=exc)
        return EventLogStorageError(detail)


def _resolve_fault(fault: FaultContext | BaseException | None) -> FaultContext | None:
    if isinstance(fault, FaultContext):
        return fault
    if isinstance(fault, BaseException):
        return FaultContext.from_exception(fault)
    return FaultContext.current()
