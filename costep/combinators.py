"""
Sequential and parallel composition of tasks.

Both combinators fold their tasks into one chain that waits on each task in
input order. They differ only in when a task is started: ``parallel`` starts
every task up front, ``series`` starts each one when its turn comes.

Two limitations are kept on purpose and callers should be aware of them:

- The combined future carries no values. It fulfils with ``None``; collect
  per-task results yourself if you need them.
- Rejection follows the chain order, not completion order. If the second
  task fails while the first is still pending, the combined future rejects
  only once the first one has fulfilled.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from functools import partial
from typing import TYPE_CHECKING

from costep.classify import is_task
from costep.errors import NotATaskError

if TYPE_CHECKING:
    from costep.driver import Driver
    from costep.types import Task

logger = logging.getLogger(__name__)

Link = Callable[[], asyncio.Future]


def parallel(driver: Driver, tasks: Sequence[Task]) -> asyncio.Future:
    """Start every task now and fulfil once all of them have fulfilled.

    An element that is not a task becomes a future rejected with
    ``NotATaskError``; the other tasks still start.
    """
    started = [_start_or_reject(driver, task) for task in tasks]
    return _fold(driver.loop, [partial(_identity, future) for future in started])


def series(driver: Driver, tasks: Sequence[Task]) -> asyncio.Future:
    """Start each task only after the previous one has fulfilled."""
    return _fold(driver.loop, [partial(_start_checked, driver, task) for task in tasks])


def _identity(future: asyncio.Future) -> asyncio.Future:
    return future


def _start_or_reject(driver: Driver, task: Task) -> asyncio.Future:
    if is_task(task):
        return driver.start(task)
    failed = driver.loop.create_future()
    failed.set_exception(NotATaskError(task))
    return failed


def _start_checked(driver: Driver, task: Task) -> asyncio.Future:
    if not is_task(task):
        raise NotATaskError(task)
    return driver.start(task)


def _fold(loop: asyncio.AbstractEventLoop, links: list[Link]) -> asyncio.Future:
    combined = loop.create_future()

    def run_link(index: int) -> None:
        if combined.done():
            return
        if index == len(links):
            combined.set_result(None)
            return
        try:
            future = links[index]()
        except Exception as exc:
            combined.set_exception(exc)
            return
        future.add_done_callback(partial(on_settled, index))

    def on_settled(index: int, future: asyncio.Future) -> None:
        if combined.done():
            return
        if future.cancelled():
            combined.cancel()
            return
        exc = future.exception()
        if exc is not None:
            logger.debug("task %d of %d failed: %r", index + 1, len(links), exc)
            combined.set_exception(exc)
            return
        run_link(index + 1)

    loop.call_soon(run_link, 0)
    return combined


__all__ = ["parallel", "series"]
