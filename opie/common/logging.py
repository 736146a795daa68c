"""JSON logging with stable schema."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from opie.common.constants import JSON_LOG_FIELDS
from opie.common.fs import ensure_dir
from opie.common.time_utils import utc_timestamp_iso


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": utc_timestamp_iso(),
            "level": record.levelname,
            "run_id": getattr(record, "run_id", None),
            "operation": getattr(record, "operation", None),
            "step": getattr(record, "step", None),
            "event": getattr(record, "event", None),
            "status": getattr(record, "status", None),
            "duration_ms": getattr(record, "duration_ms", None),
            "error_code": getattr(record, "error_code", None),
            "message": record.getMessage(),
        }
        for field in JSON_LOG_FIELDS:
            payload.setdefault(field, None)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def reset_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def build_logger(run_id: str, log_path: Path | None = None, level: str = "INFO") -> logging.Logger:
    """Return the run logger and route engine records through the same handlers."""
    if level.upper() == "WARN":
        level = "WARNING"

    logger = logging.getLogger(f"opie.run.{run_id}")
    logger.setLevel(level.upper())
    reset_handlers(logger)
    logger.propagate = False

    handlers: list[logging.Handler] = []
    stream = logging.StreamHandler()
    stream.setFormatter(JsonLineFormatter())
    handlers.append(stream)

    if log_path is not None:
        ensure_dir(log_path.parent)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(JsonLineFormatter())
        handlers.append(file_handler)

    for handler in handlers:
        logger.addHandler(handler)

    engine_logger = logging.getLogger("opie.operation")
    engine_logger.setLevel(level.upper())
    reset_handlers(engine_logger)
    engine_logger.propagate = False
    for handler in handlers:
        engine_logger.addHandler(handler)

    return logger


def log_event(
    logger: logging.Logger,
    message: str,
    level: int = logging.INFO,
    exc_info: bool = False,
    **event_fields: Any,
) -> None:
    logger.log(level, message, exc_info=exc_info, extra=event_fields)
