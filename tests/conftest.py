"""Shared fixtures for costep tests."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterator

import pytest

from costep import Driver


async def _settle_turns(count: int = 5) -> None:
    for _ in range(count):
        await asyncio.sleep(0)


@pytest.fixture
def settle() -> Callable[..., Awaitable[None]]:
    """Awaitable helper letting the loop run a few rounds of queued callbacks."""

    return _settle_turns


@pytest.fixture
def events() -> list[str]:
    return []


@pytest.fixture
def manual_loop() -> Iterator[asyncio.AbstractEventLoop]:
    """A loop that is not running; tests drive it with run_until_complete."""

    loop = asyncio.new_event_loop()
    try:
        yield loop
    finally:
        loop.close()


@pytest.fixture
def pinned_driver(manual_loop: asyncio.AbstractEventLoop) -> Driver:
    return Driver(manual_loop)
