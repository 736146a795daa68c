"""Failure values and the signal that carries them out of a step."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from opie.common.errors import OperationUsageError

_MISSING = object()


def _freeze(value: Any) -> Any:
    if isinstance(value, dict):
        return frozenset((_freeze(k), _freeze(v)) for k, v in value.items())
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(_freeze(item) for item in value)
    try:
        hash(value)
    except TypeError:
        # Unhashable: hash by type only.
        return type(value).__qualname__
    return value


@dataclass(frozen=True, eq=True)
class Failure:
    """Why an operation stopped.

    ``type`` is a symbolic identifier chosen by the step author, ``data`` is any
    payload worth reporting (validation errors, the offending record, an
    exception). Two failures are equal when both fields are equal.
    """

    type: Any = _MISSING
    data: Any = None

    def __post_init__(self) -> None:
        if self.type is _MISSING or self.type is None:
            raise OperationUsageError("Failure requires a type")

    def __hash__(self) -> int:
        return hash((_freeze(self.type), _freeze(self.data)))

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "data": self.data}


class FailureSignal(Exception):
    """Raised by ``Operation.fail``; never leaves the step invocation."""

    def __init__(self, failure: Failure) -> None:
        super().__init__(f"Step failed: {failure.type}")
        self.failure = failure
