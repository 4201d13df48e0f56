"""
Adapters from error-first callback APIs to futures.

A callback-style function takes a completion callback as its last positional
argument and calls it as ``callback(err, result)``. ``promisify`` turns such a
function into one returning an asyncio future, so that generators driven by
costep can simply ``yield`` the call.

Some legacy APIs put the result into the error slot. Only ``None``, strings
and exceptions are read as errors; any other value in that slot is taken to
be the result.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, MutableMapping
from functools import wraps
from typing import Any, TypeVar

from costep.errors import CallbackError

T = TypeVar("T")

logger = logging.getLogger(__name__)

DEFAULT_SUFFIX = "_async"


def promisify(
    fn: Callable[..., Any], *, loop: asyncio.AbstractEventLoop | None = None
) -> Callable[..., asyncio.Future]:
    """Wrap a callback-style function so that it returns a future.

    Args:
        fn: Function whose last positional parameter is a ``(err, result)``
            completion callback.
        loop: Loop the futures are created on. Defaults to the loop running
            when the wrapper is called.

    Returns:
        A function taking the same arguments as ``fn`` minus the callback.
        The callback may be called from any thread; only the first call
        counts.
    """

    @wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> asyncio.Future:
        target = loop if loop is not None else asyncio.get_running_loop()
        future = target.create_future()

        def settle(err: Any, result: Any) -> None:
            if future.done():
                logger.debug(
                    "%s: ignoring late callback (%r, %r)", getattr(fn, "__name__", fn), err, result
                )
                return
            if err is None:
                future.set_result(result)
            elif isinstance(err, BaseException):
                future.set_exception(err)
            elif isinstance(err, str):
                if err:
                    future.set_exception(CallbackError(err))
                else:
                    future.set_result(result)
            else:
                future.set_result(err)

        called = False

        def callback(err: Any = None, result: Any = None, *_rest: Any) -> None:
            nonlocal called
            called = True
            target.call_soon_threadsafe(settle, err, result)

        try:
            fn(*args, callback, **kwargs)
        except Exception as exc:
            # A raise after the callback fired does not override its outcome.
            if not called and not future.done():
                future.set_exception(exc)
        return future

    return wrapper


def promisify_all(
    obj: T,
    *,
    suffix: str = DEFAULT_SUFFIX,
    loop: asyncio.AbstractEventLoop | None = None,
) -> T:
    """Add a future-returning sibling for every public callable of ``obj``.

    ``obj.read`` gets a companion ``obj.read_async``; names already ending in
    ``suffix`` are skipped, so calling this twice does not stack suffixes.
    Mappings are handled by key instead of attribute. ``obj`` is modified in
    place and returned.
    """
    if isinstance(obj, MutableMapping):
        for name, value in list(obj.items()):
            if isinstance(name, str) and callable(value) and not name.endswith(suffix):
                obj[name + suffix] = promisify(value, loop=loop)
        return obj

    for name in dir(obj):
        if name.startswith("_") or name.endswith(suffix):
            continue
        value = getattr(obj, name)
        if callable(value):
            setattr(obj, name + suffix, promisify(value, loop=loop))
    return obj


__all__ = ["DEFAULT_SUFFIX", "promisify", "promisify_all"]
