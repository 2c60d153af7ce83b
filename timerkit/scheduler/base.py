"""Scheduling primitive contract consumed by timers.

Timers rely on exactly two scheduling operations: start a one-shot callback
after a delay, and cancel it. ``now`` is the clock paired with the adapter;
registries use it to measure elapsed time for pause/resume.

All delays and clock readings are in milliseconds.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from ..unit import Second

Callback = Callable[[], Any]


@runtime_checkable
class Scheduler(Protocol):
    """Single-shot delayed-callback facility supplied by the host.

    Methods:
        schedule_once: Invoke ``callback`` once after ``delay`` milliseconds
            and return a handle that can be cancelled.
        cancel: Prevent a not-yet-fired callback from firing. No effect if
            it already fired or was already cancelled.
        now: Current clock reading in milliseconds.
    """

    def schedule_once(self, delay: float, callback: Callback) -> Any: ...
    def cancel(self, handle: Any) -> None: ...
    def now(self) -> float: ...


def to_millis(value: float | Second) -> float:
    """Return ``value`` in milliseconds, converting duration units."""
    if isinstance(value, Second):
        return value.millis()
    return float(value)
