"""
Debounce primitive for asyncio

A Debouncer buffers the most recent value pushed into it and hands it to a
callback only after the input has been quiet for `delay` seconds. Each push
restarts the quiet period by cancelling the pending delayed task.

With `distinct=True` a settled value equal to the previously delivered one is
suppressed, so flipping a selector away and back inside the window does not
produce an extra delivery.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional, Union

from .logger import get_logger


_UNSET = object()

Callback = Callable[[Any], Union[None, Awaitable[None]]]


class Debouncer:
    """
    Delay-and-coalesce a stream of values

    Must be used from inside a running event loop. The callback may be a
    plain function or a coroutine function; coroutine callbacks are awaited
    inside the settle task.
    """

    def __init__(self, delay: float, callback: Callback, distinct: bool = False,
                 name: str = "debounce", initial: Any = _UNSET):
        """
        Args:
            delay: Quiet period in seconds
            callback: Called with the settled value
            distinct: Suppress a settled value equal to the last delivered one
            name: Label used in log messages
            initial: Value treated as already delivered, so a distinct
                debouncer suppresses it until something else is delivered
        """
        if delay < 0:
            raise ValueError(f"Debounce delay must not be negative: {delay}")

        self.delay = delay
        self.callback = callback
        self.distinct = distinct
        self.name = name
        self.logger = get_logger(__name__)

        self._task: Optional[asyncio.Task] = None
        self._last_delivered: Any = initial
        self._closed = False

    @property
    def pending(self) -> bool:
        """True while a value is waiting for its quiet period to elapse"""
        return self._task is not None and not self._task.done()

    def push(self, value: Any) -> None:
        """Buffer a value and restart the quiet period"""
        if self._closed:
            return
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._settle(value))

    def cancel(self) -> None:
        """Drop the pending value without delivering it"""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def close(self) -> None:
        """Cancel any pending value and refuse further pushes"""
        self.cancel()
        self._closed = True

    async def _settle(self, value: Any) -> None:
        await asyncio.sleep(self.delay)

        if self.distinct and self._last_delivered is not _UNSET and value == self._last_delivered:
            self.logger.debug(f"{self.name}: duplicate value suppressed: {value!r}")
            return

        self._last_delivered = value
        # Detach before delivering so a push from inside the callback is not cancelled with us
        if self._task is asyncio.current_task():
            self._task = None

        try:
            result = self.callback(value)
            if asyncio.iscoroutine(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.error(f"{self.name}: callback failed: {e}", exc_info=True)
