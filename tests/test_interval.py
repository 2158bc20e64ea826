import asyncio
import logging

import pytest

from book_viewer.datafeed.interval import Interval


@pytest.mark.asyncio
async def test_fires_on_cadence():
    calls = []

    async def callback():
        calls.append(asyncio.get_running_loop().time())

    async with Interval(0.02, callback):
        await asyncio.sleep(0.15)

    assert 3 <= len(calls) <= 9


@pytest.mark.asyncio
async def test_does_not_wait_for_slow_callbacks():
    started = 0

    async def slow():
        nonlocal started
        started += 1
        await asyncio.sleep(1.0)

    timer = Interval(0.02, slow)
    timer.start()
    await asyncio.sleep(0.15)
    assert started >= 4
    assert timer.pending >= 4

    await timer.stop()
    assert timer.pending == 0
    assert not timer.running


@pytest.mark.asyncio
async def test_callback_is_read_at_fire_time():
    hits = {"a": 0, "b": 0}

    async def a():
        hits["a"] += 1

    async def b():
        hits["b"] += 1

    timer = Interval(0.02, a)
    async with timer:
        await asyncio.sleep(0.07)
        timer.callback = b
        await asyncio.sleep(0.005)  # Let already-fired tasks run
        a_hits = hits["a"]
        await asyncio.sleep(0.07)

    assert a_hits >= 1
    assert hits["a"] == a_hits
    assert hits["b"] >= 1


@pytest.mark.asyncio
async def test_callback_errors_are_logged_not_raised(caplog):
    async def broken():
        raise RuntimeError("boom")

    with caplog.at_level(logging.ERROR, logger="book_viewer.datafeed.interval"):
        async with Interval(0.02, broken) as timer:
            await asyncio.sleep(0.07)
            assert timer.running

    assert any("Interval callback failed" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_start_is_idempotent():
    async def noop():
        pass

    timer = Interval(0.02, noop)
    timer.start()
    first = timer._timer
    timer.start()
    assert timer._timer is first
    await timer.stop()
