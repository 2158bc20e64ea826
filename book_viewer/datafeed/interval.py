"""
Fixed-cadence async timer.

Each firing runs the callback as its own task and does not wait for earlier
firings to finish, so slow callbacks overlap instead of delaying the cadence.
The callback is read at fire time: assign `interval.callback` to swap it
without restarting the timer.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


class Interval:
    """
    Usage:
        async with Interval(0.25, poll) as timer:
            ...
            timer.callback = poll_with_new_params
    """

    def __init__(self, period_s: float, callback: Callable[[], Awaitable[Any]]) -> None:
        self.period_s = period_s
        self.callback = callback

        self._timer: asyncio.Task | None = None
        self._tasks: set[asyncio.Task] = set()

    async def __aenter__(self) -> "Interval":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    @property
    def running(self) -> bool:
        return self._timer is not None

    @property
    def pending(self) -> int:
        """Callback tasks that have fired but not finished."""
        return len(self._tasks)

    def start(self) -> None:
        """Start firing. No-op if already running. Requires a running loop."""
        if self._timer is None:
            self._timer = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        """Stop the timer and cancel every callback still running."""
        pending = [task for task in self._tasks]
        if self._timer is not None:
            pending.append(self._timer)
            self._timer = None
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        self._tasks.clear()

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        next_fire = loop.time() + self.period_s
        while True:
            await asyncio.sleep(max(0.0, next_fire - loop.time()))
            self._fire()
            next_fire += self.period_s
            # Don't burst to catch up after a stall
            if next_fire < loop.time():
                next_fire = loop.time() + self.period_s

    def _fire(self) -> None:
        task = asyncio.create_task(self.callback())
        self._tasks.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Interval callback failed", exc_info=exc)
