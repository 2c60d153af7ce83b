"""Wall-clock scheduler backed by ``threading.Timer``.

Each schedule runs on its own timer thread, so callbacks arrive on a thread
other than the caller's. Timers serialize their transitions with their
registry's lock and drop fires from cancelled cycles, which makes this
adapter safe to use from multiple threads.
"""

from __future__ import annotations

import threading
import time

from .base import Callback, to_millis


class ThreadingScheduler:
    """Scheduler using one ``threading.Timer`` per pending call.

    Attributes:
        daemon: Whether timer threads are daemon threads.
    """

    def __init__(self, daemon: bool = True):
        self.daemon = daemon

    def schedule_once(self, delay, callback: Callback) -> threading.Timer:
        """Start ``callback`` after ``delay`` milliseconds on a timer thread."""
        seconds = max(0.0, to_millis(delay)) / 1000.0
        handle = threading.Timer(seconds, callback)
        handle.daemon = self.daemon
        handle.name = f"timerkit-{id(handle):x}"
        handle.start()
        return handle

    def cancel(self, handle: threading.Timer) -> None:
        handle.cancel()

    def now(self) -> float:
        return time.monotonic() * 1000.0
