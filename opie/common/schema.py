"""Minimal strict schema for YAML run files."""

from __future__ import annotations

from opie.common.constants import LOG_LEVELS
from opie.common.errors import ConfigError

RUN_FILE_KEYS = {"operation", "input", "context", "logging"}


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def validate_operation_path(value) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError("operation must be a non-empty string")
    module_name, sep, attr = value.strip().partition(":")
    if not sep or not module_name or not attr:
        raise ConfigError(f"operation must look like 'package.module:ClassName' (got {value!r})")
    return value.strip()


def validate_run_config(cfg, *, allow_unknown: bool = False) -> dict:
    if not isinstance(cfg, dict):
        raise ConfigError("run file must be a mapping")
    _assert_required_keys(cfg, {"operation"}, "run file")
    _assert_no_unknown_keys(cfg, RUN_FILE_KEYS, "run file", allow_unknown)

    cfg["operation"] = validate_operation_path(cfg["operation"])

    logging_cfg = cfg.get("logging")
    if logging_cfg is None:
        logging_cfg = {}
    if not isinstance(logging_cfg, dict):
        raise ConfigError("logging must be a mapping")
    _assert_no_unknown_keys(logging_cfg, {"level"}, "logging", allow_unknown)
    level = str(logging_cfg.get("level", "INFO")).upper()
    if level not in LOG_LEVELS:
        raise ConfigError(f"logging.level must be one of {', '.join(LOG_LEVELS)} (got {level})")
    logging_cfg["level"] = level
    cfg["logging"] = logging_cfg

    return cfg
