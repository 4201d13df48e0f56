"""
Generator driver for the costep system.

The driver is a trampoline: it steps a generator, looks at each yielded value
and decides how to obtain the value to send back. Nested generators are
driven recursively, lists of tasks go through the parallel combinator and
futures suspend the generator until they settle. Failures are thrown back
into the generator at the yield that produced them.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from collections.abc import Sequence
from functools import partial
from typing import Any

from costep import combinators
from costep.classify import (
    is_async_result,
    is_computation,
    is_stepped,
    is_task_collection,
)
from costep.errors import NotATaskError
from costep.types import StepGenerator, Task
from costep.utils import DEBUG_DRIVER, describe

logger = logging.getLogger(__name__)


class Driver:
    """
    Steps generators to completion on an asyncio event loop.

    The loop is the future factory: every result future is created on it and
    every resumption is queued on it. Pass ``loop`` to pin the driver to a
    specific loop (for example a loop driven manually in tests); without it
    the running loop is looked up on each call.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()

    def spawn(self, task: Task) -> asyncio.Future:
        """Drive ``task`` and return a future for its return value.

        Args:
            task: A generator, or a generator factory which is called with no
                arguments to create one.

        Returns:
            A future fulfilled with the generator's return value, or rejected
            with the exception that terminated it.

        Raises:
            NotATaskError: If ``task`` is neither a generator nor a factory.
        """
        if is_computation(task):
            gen = task()
        elif is_stepped(task):
            gen = task
        else:
            raise NotATaskError(task)

        loop = self.loop
        result = loop.create_future()
        if DEBUG_DRIVER:
            logger.debug("spawn %s", describe(gen))
        loop.call_soon(self._advance, gen, result, None, None)
        return result

    def start(self, task: Task) -> asyncio.Future:
        """Return a future for ``task``, spawning it when it is not awaitable already."""
        if is_async_result(task):
            return self.as_future(task)
        return self.spawn(task)

    def as_future(self, awaitable: Any) -> asyncio.Future:
        if asyncio.isfuture(awaitable):
            return awaitable
        if isinstance(awaitable, concurrent.futures.Future):
            return asyncio.wrap_future(awaitable, loop=self.loop)
        return asyncio.ensure_future(awaitable, loop=self.loop)

    def parallel(self, tasks: Sequence[Task]) -> asyncio.Future:
        return combinators.parallel(self, tasks)

    def series(self, tasks: Sequence[Task]) -> asyncio.Future:
        return combinators.series(self, tasks)

    def _advance(
        self,
        gen: StepGenerator[Any],
        result: asyncio.Future,
        value: Any,
        error: BaseException | None,
    ) -> None:
        # Plain values are sent straight back, so this loops until the
        # generator finishes or yields something that has to be waited on.
        while True:
            try:
                if error is not None:
                    yielded = gen.throw(error)
                else:
                    yielded = gen.send(value)
            except StopIteration as stop:
                if DEBUG_DRIVER:
                    logger.debug("%s settled with %s", describe(gen), describe(stop.value))
                _fulfil(result, stop.value)
                return
            except asyncio.CancelledError:
                result.cancel()
                return
            except Exception as exc:
                if DEBUG_DRIVER:
                    logger.debug("%s failed: %r", describe(gen), exc)
                _reject(result, exc)
                return

            error = None
            try:
                pending = self._interpret(yielded)
            except Exception as exc:
                _reject(result, exc)
                return

            if pending is None:
                value = yielded
                continue

            pending.add_done_callback(partial(self._resume, gen, result))
            return

    def _interpret(self, yielded: Any) -> asyncio.Future | None:
        """Turn a yielded value into a future, or None for a plain value."""
        if is_computation(yielded) or is_stepped(yielded):
            return self.spawn(yielded)
        if is_task_collection(yielded):
            return self.parallel(yielded)
        if is_async_result(yielded):
            return self.as_future(yielded)
        return None

    def _resume(
        self, gen: StepGenerator[Any], result: asyncio.Future, settled: asyncio.Future
    ) -> None:
        if settled.cancelled():
            self._advance(gen, result, None, asyncio.CancelledError())
            return
        exc = settled.exception()
        if exc is not None:
            self._advance(gen, result, None, exc)
        else:
            self._advance(gen, result, settled.result(), None)


def _fulfil(result: asyncio.Future, value: Any) -> None:
    # The consumer may have cancelled the result; the generator still ran.
    if not result.done():
        result.set_result(value)


def _reject(result: asyncio.Future, exc: BaseException) -> None:
    if not result.done():
        result.set_exception(exc)


__all__ = ["Driver"]
