"""Canonical structured logging field names.

Operational log lines emitted by the recorder and its collaborators use these
keys so the JSON output stays stable across releases.
"""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"

# Event-log record fields.
LOG_ID = "log_id"
PROCEDURE_NAME = "procedure_name"
EVENT_TYPE = "event_type"
SEVERITY = "severity"
ACTOR = "actor"
ATTRIBUTION = "attribution"
DURABILITY = "durability"

# Failure fields.
ERROR_CODE = "error_code"
ERROR_CATEGORY = "error_category"
EXCEPTION_TYPE = "exception_type"

# Common service-level fields.
SERVICE = "service"
ENVIRONMENT = "environment"
