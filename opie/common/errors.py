"""Library errors and error codes."""


class OpieError(Exception):
    """Base class for opie errors."""

    error_code = "OPIE_ERROR"


class ConfigError(OpieError):
    """Raised for invalid or missing run configuration."""

    error_code = "CONFIG_ERROR"


class OperationUsageError(OpieError, TypeError):
    """Raised when the operation API is misused by the calling code.

    Never converted into an operation failure: it escapes ``call``.
    """

    error_code = "USAGE_ERROR"


class OperationLoadError(OpieError):
    """Raised when an operation path cannot be resolved to an Operation class."""

    error_code = "LOAD_ERROR"
