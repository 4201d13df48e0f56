"""Predicates sorting yielded values into the shapes the driver understands."""

from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
from collections.abc import Generator
from typing import Any

from costep.types import Suspendable


def is_computation(value: Any) -> bool:
    """True for a generator factory: a ``Suspendable`` or a generator function."""
    return isinstance(value, Suspendable) or inspect.isgeneratorfunction(value)


def is_stepped(value: Any) -> bool:
    """True for an already created generator (exposes ``send`` and ``throw``)."""
    return isinstance(value, Generator)


def is_async_result(value: Any) -> bool:
    """True for a future or any other awaitable that is not itself a generator."""
    if asyncio.isfuture(value) or isinstance(value, concurrent.futures.Future):
        return True
    return not is_stepped(value) and inspect.isawaitable(value)


def is_task(value: Any) -> bool:
    return is_computation(value) or is_stepped(value) or is_async_result(value)


def is_task_collection(value: Any) -> bool:
    """
    True for a list or tuple made only of tasks.

    A single plain element turns the whole collection into a plain value.
    Empty collections qualify.
    """
    if not isinstance(value, (list, tuple)):
        return False
    return all(is_task(item) for item in value)


__all__ = [
    "is_async_result",
    "is_computation",
    "is_stepped",
    "is_task",
    "is_task_collection",
]
