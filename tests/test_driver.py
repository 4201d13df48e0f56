"""Tests for Driver.spawn: stepping, yield interpretation and failure forwarding."""

from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
import logging
import threading

import pytest

import costep.driver
from costep import Driver, NotATaskError, spawn, suspendable


@pytest.mark.asyncio
async def test_return_value_fulfils_result() -> None:
    def compute():
        yield
        return "done"

    assert await spawn(compute) == "done"


@pytest.mark.asyncio
async def test_first_step_is_not_synchronous(events: list[str]) -> None:
    def record():
        events.append("started")
        yield
        return None

    future = spawn(record)

    assert events == []
    await future
    assert events == ["started"]


@pytest.mark.asyncio
async def test_plain_values_are_sent_back_in_the_same_turn() -> None:
    def echo():
        first = yield 1
        second = yield "two"
        third = yield {"three": 3}
        return first, second, third

    future = spawn(echo)
    await asyncio.sleep(0)

    assert future.done()
    assert future.result() == (1, "two", {"three": 3})


@pytest.mark.asyncio
async def test_many_plain_yields_do_not_grow_the_stack() -> None:
    def count():
        total = 0
        for i in range(20000):
            total += yield i
        return total

    assert await spawn(count) == sum(range(20000))


@pytest.mark.asyncio
async def test_yielded_generator_is_driven_recursively() -> None:
    def inner(x: int):
        y = yield asyncio.sleep(0, x * 2)
        return y + 1

    def outer():
        a = yield inner(1)
        b = yield inner(a)
        return b

    assert await spawn(outer()) == 7


@pytest.mark.asyncio
async def test_yielded_factory_is_called_without_arguments() -> None:
    def child():
        yield
        return "child"

    def parent():
        value = yield child
        also = yield suspendable(lambda: child())
        return value, also

    assert await spawn(parent) == ("child", "child")


@pytest.mark.asyncio
async def test_future_suspends_until_settled(events: list[str], settle) -> None:
    gate = asyncio.get_running_loop().create_future()

    def waiter():
        events.append("waiting")
        value = yield gate
        events.append(f"got {value}")
        return value

    future = spawn(waiter)
    await settle()

    assert events == ["waiting"]
    assert not future.done()

    gate.set_result(5)
    assert await future == 5
    assert events == ["waiting", "got 5"]


@pytest.mark.asyncio
async def test_resumption_is_queued_not_inline(events: list[str], settle) -> None:
    gate = asyncio.get_running_loop().create_future()

    def waiter():
        yield gate
        events.append("resumed")

    future = spawn(waiter)
    await settle()

    gate.set_result(None)
    events.append("settled")
    await future

    assert events == ["settled", "resumed"]


@pytest.mark.asyncio
async def test_awaitables_are_accepted() -> None:
    async def fetch(x: int) -> int:
        await asyncio.sleep(0)
        return x + 1

    def use():
        a = yield fetch(1)
        b = yield asyncio.ensure_future(fetch(a))
        return b

    assert await spawn(use) == 3


@pytest.mark.asyncio
async def test_concurrent_future_from_a_thread() -> None:
    source: concurrent.futures.Future = concurrent.futures.Future()
    threading.Timer(0.01, source.set_result, args=("from thread",)).start()

    def use():
        value = yield source
        return value

    assert await spawn(use) == "from thread"


@pytest.mark.asyncio
async def test_mixed_list_is_sent_back_as_a_plain_value() -> None:
    child = (x for x in [1])
    mixed = [child, 5]

    def parent():
        received = yield mixed
        return received

    result = await spawn(parent)

    assert result is mixed
    assert inspect.getgeneratorstate(child) == inspect.GEN_CREATED


@pytest.mark.asyncio
async def test_task_list_runs_in_parallel_and_sends_none(events: list[str]) -> None:
    def worker(name: str):
        events.append(f"{name} start")
        yield asyncio.sleep(0)
        events.append(f"{name} end")
        return name

    def parent():
        value = yield [worker("a"), worker("b")]
        return value

    assert await spawn(parent) is None
    assert events == ["a start", "b start", "a end", "b end"]


@pytest.mark.asyncio
async def test_empty_list_is_an_empty_batch() -> None:
    def parent():
        value = yield []
        return value

    assert await spawn(parent) is None


@pytest.mark.asyncio
async def test_failure_is_thrown_in_and_can_be_recovered() -> None:
    def failing():
        yield
        raise ValueError("bad input")

    def resilient():
        try:
            yield failing()
        except ValueError as exc:
            message = str(exc)
        later = yield asyncio.sleep(0, "later")
        return message, later

    assert await spawn(resilient) == ("bad input", "later")


@pytest.mark.asyncio
async def test_recovery_by_returning_fulfils() -> None:
    gate = asyncio.get_running_loop().create_future()
    gate.set_exception(KeyError("missing"))

    def fallback():
        try:
            yield gate
        except KeyError:
            return "fallback"
        return "unreachable"

    assert await spawn(fallback) == "fallback"


@pytest.mark.asyncio
async def test_unrecovered_failure_rejects_with_same_exception() -> None:
    error = RuntimeError("boom")
    gate = asyncio.get_running_loop().create_future()
    gate.set_exception(error)

    def careless():
        yield gate
        return "unreachable"

    with pytest.raises(RuntimeError) as exc_info:
        await spawn(careless)

    assert exc_info.value is error


@pytest.mark.asyncio
async def test_exception_before_first_yield_rejects() -> None:
    def broken():
        raise LookupError("nothing here")
        yield

    with pytest.raises(LookupError, match="nothing here"):
        await spawn(broken)


@pytest.mark.asyncio
async def test_failure_raised_by_an_awaitable_rejects() -> None:
    class Exploding:
        def __await__(self):
            raise OSError("cannot await")

    def parent():
        yield Exploding()

    with pytest.raises(OSError, match="cannot await"):
        await spawn(parent)


@pytest.mark.asyncio
async def test_failure_while_interpreting_a_yield_rejects(events: list[str]) -> None:
    def parent():
        events.append("before")
        yield suspendable(lambda: "not a generator")
        events.append("after")

    with pytest.raises(TypeError, match="expected a generator"):
        await spawn(parent)

    assert events == ["before"]


@pytest.mark.asyncio
async def test_cancelled_future_is_thrown_in_as_cancelled_error() -> None:
    gate = asyncio.get_running_loop().create_future()
    gate.cancel()

    def observer():
        try:
            yield gate
        except asyncio.CancelledError:
            return "noticed"
        return "unreachable"

    assert await spawn(observer) == "noticed"


@pytest.mark.asyncio
async def test_uncaught_cancellation_cancels_result(settle) -> None:
    gate = asyncio.get_running_loop().create_future()
    gate.cancel()

    def careless():
        yield gate

    future = spawn(careless)
    await settle()

    assert future.cancelled()


@pytest.mark.asyncio
async def test_cancelled_result_does_not_stop_the_generator(events: list[str], settle) -> None:
    gate = asyncio.get_running_loop().create_future()

    def worker():
        yield gate
        events.append("finished")
        return 1

    future = spawn(worker)
    await settle()
    future.cancel()
    gate.set_result(None)
    await settle()

    assert events == ["finished"]
    assert future.cancelled()


@pytest.mark.asyncio
async def test_spawn_rejects_non_tasks_synchronously() -> None:
    with pytest.raises(NotATaskError) as exc_info:
        spawn(lambda: 1)

    assert isinstance(exc_info.value, TypeError)
    assert "@suspendable" in str(exc_info.value)


def test_pinned_driver_on_manual_loop(manual_loop: asyncio.AbstractEventLoop) -> None:
    driver = Driver(manual_loop)

    def compute():
        value = yield asyncio.sleep(0, 20)
        return value + 1

    future = driver.spawn(compute)

    assert future.get_loop() is manual_loop
    assert manual_loop.run_until_complete(future) == 21


def test_driver_without_loop_needs_a_running_loop() -> None:
    def compute():
        yield

    with pytest.raises(RuntimeError):
        Driver().spawn(compute)


@pytest.mark.asyncio
async def test_debug_logging(monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture) -> None:
    monkeypatch.setattr(costep.driver, "DEBUG_DRIVER", True)
    caplog.set_level(logging.DEBUG, logger="costep.driver")

    def failing():
        yield
        raise ValueError("logged")

    with pytest.raises(ValueError):
        await spawn(failing)

    assert any(message.startswith("spawn ") for message in caplog.messages)
    assert any("ValueError('logged')" in message for message in caplog.messages)


@pytest.mark.asyncio
async def test_debug_logging_records_settlement(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setattr(costep.driver, "DEBUG_DRIVER", True)
    caplog.set_level(logging.DEBUG, logger="costep.driver")

    def compute():
        yield
        return "answer"

    assert await spawn(compute) == "answer"
    assert any(message.endswith("settled with 'answer'") for message in caplog.messages)
