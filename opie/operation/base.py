"""Operation base class: step declaration, entry points and outcome interface."""

from __future__ import annotations

from typing import Any, Callable, ClassVar, NoReturn

from opie.common.errors import OperationUsageError
from opie.operation.engine import execute_steps
from opie.operation.failure import Failure, FailureSignal
from opie.operation.steps import StepRef, build_step_list, make_step_ref

_MISSING = object()


class Operation:
    """A business operation composed of an ordered list of steps.

    Subclasses declare their steps as method names or other ``Operation``
    subclasses::

        class Greet(Operation):
            steps = ("alpha", "beta")

            def alpha(self, text):
                return text + " world"

            def beta(self, text):
                return text + "!"

        Greet.call("hello").output  # "hello world!"

    Each step receives the previous step's return value. A list or tuple is
    unpacked when its length matches the number of positional parameters of
    the next step. A step that declares a ``context`` parameter also receives
    the context passed to ``call``. ``self.fail(type, data)`` stops the
    operation; later steps are not run.
    """

    steps: ClassVar[Any] = ()
    _step_list: ClassVar[tuple[StepRef, ...]] = ()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "steps" in cls.__dict__:
            cls._step_list = build_step_list(cls.__dict__["steps"])
        else:
            cls._step_list = tuple(cls._step_list)

    def __init__(self) -> None:
        self.output: Any = None
        self.failure: Failure | None = None
        self.context: Any = None
        self.executed = False
        self._called = False

    # Type level

    @classmethod
    def step(cls, ref: Any) -> type["Operation"]:
        """Append a step to this operation type. Meant for use at definition time."""
        cls._step_list = (*cls._step_list, make_step_ref(ref))
        cls.steps = tuple(step_ref.target for step_ref in cls._step_list)
        return cls

    @classmethod
    def step_list(cls) -> tuple[StepRef, ...]:
        return cls._step_list

    @classmethod
    def call(cls, input: Any = None, context: Any = None) -> "Operation":
        return cls()(input, context)

    # Instance level

    def __call__(self, input: Any = None, context: Any = None) -> "Operation":
        if self._called:
            raise OperationUsageError(
                f"{type(self).__name__} instance was already called; use {type(self).__name__}.call()"
            )
        self._called = True
        self.context = context
        self.output, self.failure = execute_steps(self, input)
        self.executed = True
        return self

    def fail(self, type: Any = _MISSING, data: Any = None) -> NoReturn:
        if type is _MISSING or type is None:
            raise OperationUsageError("fail() requires a failure type")
        raise FailureSignal(Failure(type, data))

    # Outcome

    @property
    def is_success(self) -> bool:
        return self.executed and self.failure is None

    @property
    def is_failure(self) -> bool:
        return self.failure is not None

    @property
    def failures(self) -> list[Failure]:
        if self.failure is None:
            return []
        return [self.failure]

    def on_success(self, callback: Callable[[Any], Any]) -> "Operation":
        if self.is_success:
            callback(self.output)
        return self

    def on_failure(self, callback: Callable[[Failure], Any]) -> "Operation":
        if self.is_failure:
            callback(self.failure)
        return self

    def resolve(
        self,
        on_success: Callable[[Any], Any] | None = None,
        on_failure: Callable[[Failure], Any] | None = None,
    ) -> Any:
        """Return the matching callback's result instead of the operation."""
        if self.is_failure:
            return on_failure(self.failure) if on_failure is not None else None
        if self.is_success:
            return on_success(self.output) if on_success is not None else None
        raise OperationUsageError(f"{type(self).__name__} has not been called yet")

    def to_dict(self) -> dict[str, Any]:
        if not self.executed:
            status = "pending"
        elif self.is_failure:
            status = "failure"
        else:
            status = "success"
        return {
            "operation": type(self).__name__,
            "status": status,
            "output": self.output,
            "failure": self.failure.to_dict() if self.failure is not None else None,
        }

    def __repr__(self) -> str:
        if self.is_failure:
            return f"<{type(self).__name__} failure={self.failure!r}>"
        if self.is_success:
            return f"<{type(self).__name__} output={self.output!r}>"
        return f"<{type(self).__name__} pending>"
