"""Tests for the bounded concurrency gate."""

import asyncio

import pytest

from voxshelf.errors import ConfigError
from voxshelf.gate import ConcurrencyGate


def test_zero_capacity_is_rejected():
    with pytest.raises(ConfigError):
        ConcurrencyGate(0)


@pytest.mark.asyncio
async def test_never_more_than_capacity_running():
    capacity = 3
    gate = ConcurrencyGate(capacity)
    running = 0
    peak = 0

    async def job(i):
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(0.01)
        running -= 1
        return i

    results = await asyncio.gather(*(gate.call(job, i) for i in range(2 * capacity)))

    assert results == list(range(2 * capacity))
    assert peak == capacity
    assert gate.active == 0
    assert gate.pending == 0


@pytest.mark.asyncio
async def test_queued_calls_start_in_fifo_order():
    gate = ConcurrencyGate(1)
    started = []

    async def job(i):
        started.append(i)
        await asyncio.sleep(0)

    await asyncio.gather(*(gate.call(job, i) for i in range(5)))
    assert started == [0, 1, 2, 3, 4]


@pytest.mark.asyncio
async def test_capacity_one_runs_everything():
    gate = ConcurrencyGate(1)

    async def double(x):
        await asyncio.sleep(0)
        return x * 2

    assert await asyncio.gather(*(gate.call(double, i) for i in range(4))) == [0, 2, 4, 6]


@pytest.mark.asyncio
async def test_plain_callables_are_supported():
    gate = ConcurrencyGate(2)
    assert await gate.call(lambda a, b=0: a + b, 1, b=2) == 3


@pytest.mark.asyncio
async def test_failure_releases_slot():
    gate = ConcurrencyGate(1)

    async def boom():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await gate.call(boom)

    assert gate.active == 0

    async def ok():
        return "ok"

    assert await gate.call(ok) == "ok"


@pytest.mark.asyncio
async def test_cancelled_waiter_does_not_leak_slot():
    gate = ConcurrencyGate(1)
    release = asyncio.Event()

    async def hold():
        await release.wait()

    holder = asyncio.create_task(gate.call(hold))
    await asyncio.sleep(0)
    waiter = asyncio.create_task(gate.call(hold))
    await asyncio.sleep(0)
    assert gate.pending == 1

    waiter.cancel()
    with pytest.raises(asyncio.CancelledError):
        await waiter

    release.set()
    await holder
    assert gate.active == 0
    assert gate.pending == 0
