"""UTC timestamps and monotonic durations for log records."""

from __future__ import annotations

import time
from datetime import datetime, timezone


def utc_timestamp_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat(timespec="milliseconds")


def monotonic_ms() -> float:
    return time.perf_counter() * 1000.0


def elapsed_ms(started_ms: float) -> int:
    return int(round(monotonic_ms() - started_ms))
