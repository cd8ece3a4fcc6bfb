"""Event Log Service native package exports."""

from packages.eventlog_shared.errors import ErrorCategory, ErrorDetail
from services.state.event_log.attribution import (
    AttributionResolver,
    CallerResolver,
    CurrentUnitResolver,
    StackWalkResolver,
)
from services.state.event_log.config import EventLogSettings
from services.state.event_log.domain import (
    UNKNOWN_CALLER,
    Attribution,
    CallerIdentity,
    LogRecord,
    Severity,
)
from services.state.event_log.errors import (
    EventLogError,
    EventLogStorageError,
    EventLogValidationError,
)
from services.state.event_log.faults import FaultContext
from services.state.event_log.identity import (
    ContextIdentityProvider,
    principal_scope,
    procedure,
    procedure_scope,
)
from services.state.event_log.implementation import DefaultEventLogService
from services.state.event_log.service import EventLogService, build_event_log_service

__all__ = [
    "UNKNOWN_CALLER",
    "Attribution",
    "AttributionResolver",
    "CallerIdentity",
    "CallerResolver",
    "ContextIdentityProvider",
    "CurrentUnitResolver",
    "DefaultEventLogService",
    "ErrorCategory",
    "ErrorDetail",
    "EventLogError",
    "EventLogService",
    "EventLogSettings",
    "EventLogStorageError",
    "EventLogValidationError",
    "FaultContext",
    "LogRecord",
    "Severity",
    "StackWalkResolver",
    "build_event_log_service",
    "principal_scope",
    "procedure",
    "procedure_scope",
]
