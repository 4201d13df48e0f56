"""
costep - drive generator-based coroutines on asyncio futures.

A generator yields whatever it is waiting for: a future, an awaitable,
another generator, or a list of those to run in parallel. The driver sends
the result back in, or throws the failure in at the same yield.

Example:
    >>> from costep import coroutine, promisify
    >>>
    >>> read_async = promisify(legacy_read)  # legacy_read(path, callback)
    >>>
    >>> @coroutine
    ... def copy(src, dst):
    ...     data = yield read_async(src)
    ...     yield [write_task(dst, data), audit_task(src)]
    ...     return len(data)
"""

from costep.callbacks import DEFAULT_SUFFIX, promisify, promisify_all
from costep.classify import (
    is_async_result,
    is_computation,
    is_stepped,
    is_task,
    is_task_collection,
)
from costep.decorators import coroutine
from costep.driver import Driver
from costep.errors import CallbackError, CostepError, NotATaskError
from costep.run import default_driver, main, parallel, run, series, spawn
from costep.types import StepGenerator, Suspendable, Task, suspendable

__version__ = "0.1.0"

__all__ = [
    # Driver
    "Driver",
    "default_driver",
    "spawn",
    "parallel",
    "series",
    "main",
    "run",
    # Decorators
    "coroutine",
    "suspendable",
    "Suspendable",
    # Callback adapter
    "promisify",
    "promisify_all",
    "DEFAULT_SUFFIX",
    # Classifier
    "is_async_result",
    "is_computation",
    "is_stepped",
    "is_task",
    "is_task_collection",
    # Types
    "StepGenerator",
    "Task",
    # Errors
    "CostepError",
    "NotATaskError",
    "CallbackError",
]
