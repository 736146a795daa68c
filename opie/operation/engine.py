"""Sequential step executor with short-circuit on the first failure."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from opie.common.constants import GENERIC_FAILURE_TYPE
from opie.common.errors import OperationUsageError
from opie.common.logging import log_event
from opie.common.time_utils import elapsed_ms, monotonic_ms
from opie.operation.failure import Failure, FailureSignal
from opie.operation.result import Err, Ok, StepOutcome
from opie.operation.steps import StepRef, call_shape

if TYPE_CHECKING:
    from opie.operation.base import Operation

logger = logging.getLogger(__name__)


def _invoke_method(operation: "Operation", name: str, current: Any) -> Any:
    method = getattr(operation, name)
    shape = call_shape(method)
    args = shape.build_args(current)
    if shape.accepts_context:
        return method(*args, context=operation.context)
    return method(*args)


def _invoke_nested(nested_cls: type["Operation"], current: Any) -> StepOutcome:
    nested = nested_cls.call(current)
    if nested.is_failure:
        return Err(nested.failure)
    return Ok(nested.output)


def invoke_step(operation: "Operation", ref: StepRef, current: Any) -> StepOutcome:
    """Run one step and report its outcome instead of raising."""
    try:
        if ref.kind == "operation":
            return _invoke_nested(ref.target, current)
        return Ok(_invoke_method(operation, ref.target, current))
    except FailureSignal as signal:
        return Err(signal.failure)
    except OperationUsageError:
        raise
    except Exception as exc:
        log_event(
            logger,
            f"unexpected error in step {ref.label}",
            level=logging.ERROR,
            exc_info=True,
            operation=type(operation).__name__,
            step=ref.label,
            event="STEP_ERROR",
            status="error",
            error_code=type(exc).__name__,
        )
        return Err(Failure(GENERIC_FAILURE_TYPE, exc))


def execute_steps(operation: "Operation", input: Any) -> tuple[Any, Failure | None]:
    """Thread ``input`` through the step list of ``operation``.

    Returns ``(output, None)`` on success or ``(None, failure)`` for the first
    step that failed; no step after it is invoked.
    """
    op_name = type(operation).__name__
    current = input
    for ref in operation.step_list():
        started = monotonic_ms()
        log_event(
            logger,
            f"step {ref.label} start",
            level=logging.DEBUG,
            operation=op_name,
            step=ref.label,
            event="STEP_START",
            status="ok",
        )
        outcome = invoke_step(operation, ref, current)
        if isinstance(outcome, Err):
            log_event(
                logger,
                f"step {ref.label} failed",
                operation=op_name,
                step=ref.label,
                event="STEP_FAIL",
                status="failure",
                duration_ms=elapsed_ms(started),
                error_code=str(outcome.failure.type),
            )
            return None, outcome.failure
        current = outcome.value
        log_event(
            logger,
            f"step {ref.label} end",
            level=logging.DEBUG,
            operation=op_name,
            step=ref.label,
            event="STEP_END",
            status="ok",
            duration_ms=elapsed_ms(started),
        )
    return current, None
