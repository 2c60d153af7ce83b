"""Event-loop scheduler backed by ``loop.call_later``."""

from __future__ import annotations

import asyncio

from .base import Callback, to_millis


class AsyncioScheduler:
    """Scheduler delivering fires as asyncio loop callbacks.

    Args:
        loop: Loop to schedule on. When omitted, the loop running at the
            time of the call is used.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()

    def schedule_once(self, delay, callback: Callback) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, to_millis(delay)) / 1000.0, callback)

    def cancel(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()

    def now(self) -> float:
        return self.loop.time() * 1000.0
