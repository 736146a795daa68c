"""
Outcome of a single step invocation.

The engine turns every step call into ``Ok`` or ``Err`` and checks it before
moving on:

    outcome = invoke_step(operation, ref, current)
    if isinstance(outcome, Err):
        # stop, outcome.failure is recorded on the operation
    else:
        # continue with outcome.value
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from opie.operation.failure import Failure

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True

    @property
    def is_err(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class Err:
    failure: Failure

    @property
    def is_ok(self) -> bool:
        return False

    @property
    def is_err(self) -> bool:
        return True


StepOutcome = Union[Ok[Any], Err]
