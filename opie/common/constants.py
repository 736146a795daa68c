"""Application constants."""

GENERIC_FAILURE_TYPE = "exception"
LOG_LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")
COMMANDS = ("run",)
EXIT_SUCCESS = 0
EXIT_FAILURE = 10
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "level",
    "run_id",
    "operation",
    "step",
    "event",
    "status",
    "duration_ms",
    "error_code",
    "message",
)
