"""
The coroutine decorator for the costep system.

``@coroutine`` turns a generator function into a function returning a
future: calling it creates the generator and hands it to a driver right away.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from functools import wraps
from typing import Any, ParamSpec, TypeVar, overload

from costep.driver import Driver
from costep.types import StepGenerator

P = ParamSpec("P")
T = TypeVar("T")


@overload
def coroutine(func: Callable[P, StepGenerator[T]]) -> Callable[P, asyncio.Future]: ...


@overload
def coroutine(
    *, driver: Driver | None = None
) -> Callable[[Callable[P, StepGenerator[T]]], Callable[P, asyncio.Future]]: ...


def coroutine(
    func: Callable[P, StepGenerator[T]] | None = None,
    *,
    driver: Driver | None = None,
) -> Any:
    """
    Decorator that spawns the generator on every call.

    Can be used with or without arguments:

        @coroutine
        def load(path):
            data = yield read_file_async(path)
            return data.decode()

        @coroutine(driver=Driver(loop))
        def load(path): ...

    ``load("a.txt")`` returns a future for the decoded text. The wrapper is a
    plain function, so decorated methods bind ``self`` as usual.
    """
    runner = driver if driver is not None else Driver()

    def decorate(f: Callable[P, StepGenerator[T]]) -> Callable[P, asyncio.Future]:
        @wraps(f)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> asyncio.Future:
            return runner.spawn(f(*args, **kwargs))

        return wrapper

    if func is not None:
        return decorate(func)
    return decorate


__all__ = ["coroutine"]
