"""
Core types for the costep system.

A suspendable computation is a factory producing a generator. The driver
steps that generator, resuming it with the values (or exceptions) produced by
whatever it yields.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
import types
from collections.abc import Awaitable, Callable, Generator
from dataclasses import dataclass
from typing import Any, Generic, ParamSpec, TypeVar, Union

P = ParamSpec("P")
T = TypeVar("T")

# A stepped computation: send() resumes with a value, throw() with an error.
StepGenerator = Generator[Any, Any, T]


@dataclass
class Suspendable(Generic[P, T]):
    """
    Explicit marker for a generator factory.

    Plain generator functions are recognised by their code flags; anything
    else that builds a generator (a lambda, a factory method, a callable
    object) is wrapped here so the driver knows to call it before stepping.
    """

    func: Callable[P, StepGenerator[T]]

    def __post_init__(self) -> None:
        wrapped = getattr(self.func, "__wrapped__", self.func)
        for attr in ("__name__", "__qualname__", "__doc__", "__module__"):
            value = getattr(wrapped, attr, None)
            if value is not None:
                setattr(self, attr, value)
        try:
            self.__signature__ = inspect.signature(wrapped)  # type: ignore[attr-defined]
        except (TypeError, ValueError):
            pass

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return Suspendable(types.MethodType(self.func, instance))

    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> StepGenerator[T]:
        gen = self.func(*args, **kwargs)
        if not isinstance(gen, Generator):
            raise TypeError(
                f"{getattr(self, '__name__', self.func)!r} returned "
                f"{type(gen).__name__}, expected a generator"
            )
        return gen


# Runtime checkers need the ParamSpec components themselves, not their names.
Suspendable.__call__.__annotations__.update(
    {"args": P.args, "kwargs": P.kwargs, "return": StepGenerator[T]}
)


def suspendable(func: Callable[P, StepGenerator[T]]) -> Suspendable[P, T]:
    """
    Mark ``func`` as a suspendable computation.

    Usage:
        @suspendable
        def fetch_both(client):
            first = yield client.get("/a")
            second = yield client.get("/b")
            return first, second
    """
    return Suspendable(func)


AsyncResult = Union[asyncio.Future, concurrent.futures.Future, Awaitable[Any]]
Computation = Union[Suspendable[..., Any], Callable[..., StepGenerator[Any]]]
Task = Union[StepGenerator[Any], Computation, AsyncResult]


__all__ = [
    "AsyncResult",
    "Computation",
    "P",
    "StepGenerator",
    "Suspendable",
    "T",
    "Task",
    "suspendable",
]
