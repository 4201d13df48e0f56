"""
Entry points for running tasks.

The module-level ``spawn``, ``parallel`` and ``series`` use a shared driver
bound to whichever event loop is running when they are called. ``main`` is
meant for the outermost task of a program: it reports an uncaught failure
instead of propagating it. ``run`` drives a task to completion from
synchronous code.

Example:
    >>> import asyncio
    >>> from costep import run, suspendable
    >>>
    >>> @suspendable
    ... def answer():
    ...     value = yield asyncio.sleep(0, 42)
    ...     return value
    >>>
    >>> run(answer)
    42
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

from loguru import logger

from costep.driver import Driver
from costep.types import Task
from costep.utils import DEBUG_DRIVER

main_logger = logger.bind(component="costep.main")

default_driver = Driver()


def spawn(task: Task) -> asyncio.Future:
    """Drive ``task`` on the running loop. See ``Driver.spawn``."""
    return default_driver.spawn(task)


def parallel(tasks: Sequence[Task]) -> asyncio.Future:
    return default_driver.parallel(tasks)


def series(tasks: Sequence[Task]) -> asyncio.Future:
    return default_driver.series(tasks)


def main(task: Task, *, driver: Driver | None = None) -> asyncio.Future:
    """Drive ``task`` and log its failure instead of propagating it.

    Returns:
        A future fulfilled with the task's return value, or with ``None``
        after the failure has been written to the log. It never rejects.
    """
    runner = driver if driver is not None else default_driver
    outer = runner.loop.create_future()
    try:
        inner = runner.start(task)
    except Exception as exc:
        main_logger.opt(exception=exc).error("Uncaught failure in main task: {}", exc)
        outer.set_result(None)
        return outer

    def report(settled: asyncio.Future) -> None:
        if outer.done():
            return
        if settled.cancelled():
            main_logger.warning("Main task was cancelled")
            outer.set_result(None)
            return
        exc = settled.exception()
        if exc is not None:
            main_logger.opt(exception=exc).error("Uncaught failure in main task: {}", exc)
            outer.set_result(None)
        else:
            outer.set_result(settled.result())

    inner.add_done_callback(report)
    return outer


def run(task: Task, *, debug: bool | None = None) -> Any:
    """Run ``task`` to completion on a fresh event loop.

    Args:
        task: Generator, generator factory or awaitable.
        debug: Enable asyncio debug mode. Defaults to ``COSTEP_DEBUG``.

    Returns:
        The task's return value.

    Raises:
        Exception: Whatever terminated the task.
    """

    async def drive() -> Any:
        return await Driver().start(task)

    return asyncio.run(drive(), debug=DEBUG_DRIVER if debug is None else debug)


__all__ = ["default_driver", "main", "parallel", "run", "series", "spawn"]
