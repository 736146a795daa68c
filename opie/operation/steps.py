"""Step references and call-shape introspection."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Iterable, Literal

CONTEXT_PARAM = "context"

StepKind = Literal["method", "operation"]


@dataclass(frozen=True)
class StepRef:
    kind: StepKind
    target: Any

    @property
    def label(self) -> str:
        if self.kind == "method":
            return self.target
        return self.target.__name__


@dataclass(frozen=True)
class CallShape:
    """Positional parameter count of a step method and what else it accepts."""

    arity: int
    variadic: bool
    accepts_context: bool

    def build_args(self, current: Any) -> tuple:
        if isinstance(current, (list, tuple)) and (self.variadic or self.arity == len(current)):
            return tuple(current)
        if self.arity == 0 and not self.variadic:
            return ()
        return (current,)


def make_step_ref(ref: Any) -> StepRef:
    from opie.operation.base import Operation

    if isinstance(ref, StepRef):
        return ref
    if isinstance(ref, str):
        name = ref.strip()
        if not name:
            raise ValueError("Step name cannot be empty")
        return StepRef(kind="method", target=name)
    if isinstance(ref, type) and issubclass(ref, Operation):
        return StepRef(kind="operation", target=ref)
    raise TypeError(
        f"Step must be a method name or an Operation subclass (type={type(ref).__name__})"
    )


def build_step_list(refs: Iterable[Any]) -> tuple[StepRef, ...]:
    if isinstance(refs, (str, type)):
        refs = (refs,)
    return tuple(make_step_ref(ref) for ref in refs)


@lru_cache(maxsize=None)
def _shape_of_function(func: Callable[..., Any], bound: bool) -> CallShape:
    params = list(inspect.signature(func).parameters.values())
    if bound and params and params[0].kind in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ):
        params = params[1:]

    accepts_context = False
    arity = 0
    variadic = False
    for param in params:
        if param.name == CONTEXT_PARAM and param.kind in (
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
            inspect.Parameter.KEYWORD_ONLY,
        ):
            accepts_context = True
        elif param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            arity += 1
        elif param.kind == inspect.Parameter.VAR_POSITIONAL:
            variadic = True
    return CallShape(arity=arity, variadic=variadic, accepts_context=accepts_context)


def call_shape(method: Callable[..., Any]) -> CallShape:
    """Describe how the engine must call ``method``.

    Bound methods are cached on their underlying function so the signature of a
    step is inspected once per class, not once per call.
    """
    func = getattr(method, "__func__", None)
    if func is not None:
        return _shape_of_function(func, True)
    try:
        return _shape_of_function(method, False)
    except TypeError:
        # Unhashable callables (rare) skip the cache.
        return _shape_of_function.__wrapped__(method, False)
