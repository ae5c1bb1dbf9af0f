"""Tests for commodity_pulse.sync.scheduler."""

from __future__ import annotations

import asyncio

import pytest

from commodity_pulse.sync.scheduler import RefreshScheduler


class _Counter:
    def __init__(self, fail: bool = False) -> None:
        self.calls = 0
        self.fail = fail
        self.called = asyncio.Event()

    async def __call__(self) -> None:
        self.calls += 1
        self.called.set()
        if self.fail:
            raise RuntimeError("refresh blew up")


class TestRefreshScheduler:
    @pytest.mark.parametrize("interval", [0, -1.0])
    def test_rejects_non_positive_interval(self, interval):
        with pytest.raises(ValueError):
            RefreshScheduler(_Counter(), interval)

    async def test_ticks_repeatedly(self):
        refresh = _Counter()
        scheduler = RefreshScheduler(refresh, interval=0.01)
        scheduler.start()
        await asyncio.sleep(0.1)
        task = scheduler.stop()
        await task
        assert refresh.calls >= 2

    async def test_does_not_refresh_before_first_interval(self):
        refresh = _Counter()
        scheduler = RefreshScheduler(refresh, interval=60)
        scheduler.start()
        await asyncio.sleep(0)
        await scheduler.stop()
        assert refresh.calls == 0

    async def test_stop_interrupts_sleep(self):
        scheduler = RefreshScheduler(_Counter(), interval=3600)
        scheduler.start()
        await asyncio.sleep(0)
        task = scheduler.stop()
        await asyncio.wait_for(task, timeout=1.0)
        assert task.done()

    async def test_start_is_idempotent(self):
        scheduler = RefreshScheduler(_Counter(), interval=3600)
        scheduler.start()
        scheduler.start()
        assert scheduler.is_running
        await scheduler.stop()
        assert not scheduler.is_running

    async def test_stop_when_idle_returns_none(self):
        assert RefreshScheduler(_Counter()).stop() is None

    async def test_restart_after_stop(self):
        refresh = _Counter()
        scheduler = RefreshScheduler(refresh, interval=0.01)
        scheduler.start()
        await scheduler.stop()
        scheduler.start()
        await asyncio.wait_for(refresh.called.wait(), timeout=1.0)
        await scheduler.stop()
        assert refresh.calls >= 1

    async def test_failed_refresh_keeps_loop_alive(self):
        refresh = _Counter(fail=True)
        scheduler = RefreshScheduler(refresh, interval=0.01)
        scheduler.start()
        await asyncio.sleep(0.1)
        await scheduler.stop()
        assert refresh.calls >= 2

    async def test_in_flight_refresh_finishes_after_stop(self):
        release = asyncio.Event()
        finished = []

        async def slow_refresh() -> None:
            await release.wait()
            finished.append(True)

        scheduler = RefreshScheduler(slow_refresh, interval=0.01)
        scheduler.start()
        await asyncio.sleep(0.05)
        task = scheduler.stop()
        release.set()
        await task
        assert finished == [True]
