"""Test non-overlapping refresh scheduling"""

import asyncio

import pytest

from spotify_trends.trending.scheduler import RefreshScheduler, SchedulerState


class Gate:
    """Refresh callable that blocks until released"""

    def __init__(self, fail=False):
        self.event = asyncio.Event()
        self.calls = 0
        self.fail = fail

    async def __call__(self):
        self.calls += 1
        await self.event.wait()
        if self.fail:
            raise RuntimeError("refresh failed")


class TestRefreshScheduler:
    """Test the IDLE/REFRESHING gate"""

    @pytest.mark.asyncio
    async def test_trigger_dropped_while_refreshing(self):
        """Test a second trigger during a refresh starts nothing"""
        gate = Gate()
        scheduler = RefreshScheduler("tracks", gate)

        task = scheduler.trigger("manual")
        assert scheduler.is_refreshing
        assert scheduler.trigger("timer") is None
        assert scheduler.dropped == 1

        gate.event.set()
        await task

        assert gate.calls == 1
        assert scheduler.state is SchedulerState.IDLE
        assert scheduler.last_updated is not None

    @pytest.mark.asyncio
    async def test_idle_after_failure(self):
        gate = Gate(fail=True)
        scheduler = RefreshScheduler("tracks", gate)

        task = scheduler.trigger()
        gate.event.set()
        await task

        assert scheduler.state is SchedulerState.IDLE
        assert scheduler.trigger() is not None
        await scheduler.wait_idle()
        assert scheduler.runs == 2

    @pytest.mark.asyncio
    async def test_timer_triggers_refresh(self):
        calls = []

        async def refresh():
            calls.append(1)

        scheduler = RefreshScheduler("tracks", refresh, interval=0.02)
        scheduler.start()
        assert scheduler.timer_running
        await asyncio.sleep(0.09)
        scheduler.stop()

        assert len(calls) >= 2
        assert scheduler.last_reason == "timer"
        assert not scheduler.timer_running

    @pytest.mark.asyncio
    async def test_no_timer_without_interval(self):
        async def refresh():
            pass

        scheduler = RefreshScheduler("artists", refresh)
        scheduler.start()
        assert not scheduler.timer_running

    @pytest.mark.asyncio
    async def test_set_interval_reschedules(self):
        calls = []

        async def refresh():
            calls.append(1)

        scheduler = RefreshScheduler("tracks", refresh, interval=10)
        scheduler.start()
        scheduler.set_interval(0.02)
        await asyncio.sleep(0.07)
        scheduler.stop()

        assert scheduler.interval == 0.02
        assert calls

        with pytest.raises(ValueError):
            scheduler.set_interval(0)

    @pytest.mark.asyncio
    async def test_set_interval_on_stopped_timer(self):
        async def refresh():
            pass

        scheduler = RefreshScheduler("tracks", refresh, interval=10)
        scheduler.set_interval(5)
        assert scheduler.interval == 5
        assert not scheduler.timer_running

    @pytest.mark.asyncio
    async def test_set_interval_starts_timer_after_start(self):
        """Test a started scheduler without a period begins firing once one is set"""
        calls = []

        async def refresh():
            calls.append(1)

        scheduler = RefreshScheduler("tracks", refresh, interval=None)
        scheduler.start()
        assert not scheduler.timer_running

        scheduler.set_interval(0.02)
        assert scheduler.timer_running
        await asyncio.sleep(0.07)
        scheduler.stop()

        assert calls

    @pytest.mark.asyncio
    async def test_set_interval_after_stop_stays_stopped(self):
        async def refresh():
            pass

        scheduler = RefreshScheduler("tracks", refresh, interval=10)
        scheduler.start()
        scheduler.stop()
        scheduler.set_interval(0.02)

        assert not scheduler.timer_running

    @pytest.mark.asyncio
    async def test_stop_leaves_refresh_in_flight(self):
        """Test cancelling the timer lets the running refresh complete"""
        gate = Gate()
        scheduler = RefreshScheduler("tracks", gate, interval=10)
        scheduler.start()
        task = scheduler.trigger("manual")

        scheduler.stop()
        assert not task.done()

        gate.event.set()
        await scheduler.wait_idle()
        assert task.done() and not task.cancelled()
        assert scheduler.state is SchedulerState.IDLE
