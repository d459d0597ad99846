"""
Refresh scheduling

A RefreshScheduler guards one kind of refresh (trending tracks, roster
artists, a language switch) so that at most one of it is in flight:

    IDLE --trigger--> REFRESHING --done/failed--> IDLE

Triggers that arrive while REFRESHING are dropped, not queued. An optional
repeating timer issues "timer" triggers through the same gate.
"""

import asyncio
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, Optional

from ..utils.logger import get_logger


class SchedulerState(Enum):
    IDLE = "idle"
    REFRESHING = "refreshing"


RefreshCallable = Callable[[], Awaitable[None]]


class RefreshScheduler:
    """
    Non-overlapping runner for one refresh operation

    Must be driven from inside a running event loop.

    Attributes:
        name: Label used in logs
        interval: Timer period in seconds, or None for no timer
        last_updated: Completion time of the latest refresh (success or failure)
        runs: Number of refreshes started
        dropped: Number of triggers ignored because a refresh was in flight
    """

    def __init__(self, name: str, refresh: RefreshCallable, interval: Optional[float] = None):
        """
        Args:
            name: Label used in logs
            refresh: Coroutine function performing one refresh
            interval: Timer period in seconds; None disables the timer
        """
        self.name = name
        self.refresh = refresh
        self.interval = interval
        self.logger = get_logger(__name__)

        self.state = SchedulerState.IDLE
        self.last_updated: Optional[datetime] = None
        self.last_reason: Optional[str] = None
        self.runs = 0
        self.dropped = 0

        self._current: Optional[asyncio.Task] = None
        self._timer: Optional[asyncio.Task] = None
        self._started = False

    @property
    def is_refreshing(self) -> bool:
        return self.state is SchedulerState.REFRESHING

    @property
    def timer_running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def current_task(self) -> Optional[asyncio.Task]:
        return self._current

    def trigger(self, reason: str = "manual") -> Optional[asyncio.Task]:
        """
        Start a refresh unless one is already running

        The state moves to REFRESHING before this returns, so a second call
        in the same tick is dropped.

        Args:
            reason: Why the refresh was requested (timer, manual, language)

        Returns:
            The refresh task, or None when the trigger was dropped
        """
        if self.state is SchedulerState.REFRESHING:
            self.dropped += 1
            self.logger.debug(f"{self.name}: trigger '{reason}' dropped, refresh in flight")
            return None

        self.state = SchedulerState.REFRESHING
        self.last_reason = reason
        self.runs += 1
        self.logger.debug(f"{self.name}: refresh started ({reason})")
        self._current = asyncio.get_running_loop().create_task(self._execute(reason))
        return self._current

    async def _execute(self, reason: str) -> None:
        try:
            await self.refresh()
        except asyncio.CancelledError:
            self.logger.debug(f"{self.name}: refresh cancelled")
            raise
        except Exception as e:
            self.logger.error(f"{self.name}: refresh failed ({reason}): {e}", exc_info=True)
        finally:
            self.state = SchedulerState.IDLE
            self.last_updated = datetime.now()
            self.logger.info(f"{self.name}: refresh finished at {self.last_updated:%H:%M:%S}")

    async def wait_idle(self) -> None:
        """Wait for the in-flight refresh, if any, to finish"""
        task = self._current
        if task is not None and not task.done():
            await asyncio.gather(task, return_exceptions=True)

    def start(self) -> None:
        """Start the repeating timer (no-op without an interval or when already running)"""
        self._started = True
        if self.interval is None or self.timer_running:
            return
        self._timer = asyncio.get_running_loop().create_task(self._timer_loop(self.interval))

    async def _timer_loop(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            self.trigger("timer")

    def set_interval(self, interval: Optional[float]) -> None:
        """
        Change the timer period

        Once start() has been called the timer is rescheduled from now with
        the new period, even if it was not running before; None stops it.
        Before start() the new period only takes effect when the timer starts.
        An in-flight refresh is not touched.
        """
        if interval is not None and interval <= 0:
            raise ValueError(f"Refresh interval must be positive: {interval}")

        self._cancel_timer()
        self.interval = interval
        if self._started and interval is not None:
            self.start()

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    def stop(self) -> None:
        """Cancel the timer; an in-flight refresh is allowed to complete"""
        self._started = False
        self._cancel_timer()
