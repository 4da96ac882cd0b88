"""Tests for the event-loop scheduler with short real delays."""

import asyncio
import logging

import pytest

from job_filter.timers import AsyncioScheduler

DELAY = 0.02


async def _settle():
    await asyncio.sleep(DELAY * 5)


@pytest.mark.asyncio
async def test_same_token_fires_once_with_latest_callback():
    scheduler = AsyncioScheduler()
    fired = []

    for i in range(5):
        scheduler.schedule_after(DELAY, "rescan", lambda i=i: fired.append(i))
    assert scheduler.pending("rescan")
    await _settle()

    assert fired == [4]
    assert not scheduler.pending("rescan")


@pytest.mark.asyncio
async def test_tokens_are_independent():
    scheduler = AsyncioScheduler()
    fired = []

    scheduler.schedule_after(DELAY, "a", lambda: fired.append("a"))
    scheduler.schedule_after(DELAY, "b", lambda: fired.append("b"))
    await _settle()

    assert sorted(fired) == ["a", "b"]


@pytest.mark.asyncio
async def test_cancel_prevents_firing():
    scheduler = AsyncioScheduler()
    fired = []

    scheduler.schedule_after(DELAY, "scan", lambda: fired.append("scan"))
    scheduler.cancel("scan")
    scheduler.cancel("never-scheduled")
    await _settle()

    assert fired == []
    assert not scheduler.pending("scan")


@pytest.mark.asyncio
async def test_coroutine_callback_runs_as_task():
    scheduler = AsyncioScheduler()
    fired = []

    async def scan():
        await asyncio.sleep(0)
        fired.append("scan")

    scheduler.schedule_after(DELAY, "scan", scan)
    await _settle()

    assert fired == ["scan"]


@pytest.mark.asyncio
async def test_failures_are_logged_and_loop_keeps_going(caplog):
    scheduler = AsyncioScheduler()
    fired = []

    async def broken_scan():
        raise RuntimeError("page closed")

    def broken_filter():
        raise ValueError("detached node")

    with caplog.at_level(logging.ERROR, logger="job_filter.timers"):
        scheduler.schedule_after(DELAY, "scan", broken_scan)
        scheduler.schedule_after(DELAY, "filter", broken_filter)
        scheduler.schedule_after(DELAY * 2, "after", lambda: fired.append("after"))
        await _settle()

    assert fired == ["after"]
    assert "scheduled action 'scan' failed" in caplog.text
    assert "scheduled action 'filter' failed" in caplog.text


@pytest.mark.asyncio
async def test_sleep_waits():
    scheduler = AsyncioScheduler()
    loop = asyncio.get_running_loop()
    started = loop.time()

    await scheduler.sleep(DELAY)

    assert loop.time() - started >= DELAY * 0.9
