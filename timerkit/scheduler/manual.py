"""Virtual-clock scheduler for discrete simulations and deterministic tests.

Time only moves when :meth:`ManualScheduler.advance` is called, the same way
a simulation loop advances its clock by ``dt`` each step. Due calls fire in
due-time order; calls due at the same instant fire in the order they were
scheduled.

Example:
    >>> scheduler = ManualScheduler()
    >>> registry = TimerRegistry(scheduler)
    >>> timer = registry.create(delay=100).bind(on_fire).start()
    >>> scheduler.advance(99)   # nothing fires
    >>> scheduler.advance(1)    # on_fire(timer)
"""

from __future__ import annotations

from dataclasses import dataclass, field
import heapq
from itertools import count

from .base import Callback, to_millis


@dataclass(order=True)
class ScheduledCall:
    """A pending one-shot call on the virtual clock.

    Attributes:
        due: Clock reading (ms) at which the call fires.
        seq: Scheduling order, breaks ties between equal ``due`` values.
        scheduled_at: Clock reading when the call was scheduled.
        callback: The function to invoke.
        cancelled: Set by :meth:`ManualScheduler.cancel`.
    """

    due: float
    seq: int
    callback: Callback = field(compare=False)
    scheduled_at: float = field(default=0.0, compare=False)
    cancelled: bool = field(default=False, compare=False)
    fired: bool = field(default=False, compare=False)

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)


class ManualScheduler:
    """Scheduler whose clock is advanced explicitly.

    Args:
        start: Initial clock reading in milliseconds.
    """

    def __init__(self, start: float = 0.0):
        self._now = float(start)
        self._queue: list[ScheduledCall] = []
        self._seq = count()

    def schedule_once(self, delay, callback: Callback) -> ScheduledCall:
        due = self._now + max(0.0, to_millis(delay))
        call = ScheduledCall(due, next(self._seq), callback, scheduled_at=self._now)
        heapq.heappush(self._queue, call)
        return call

    def cancel(self, handle: ScheduledCall) -> None:
        handle.cancelled = True

    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        """Number of calls that are scheduled and neither fired nor cancelled."""
        return sum(1 for call in self._queue if call.active)

    def advance(self, dt) -> int:
        """Move the clock forward by ``dt`` and fire every call that falls due.

        Calls scheduled by callbacks during the advance also fire if they fall
        inside the window, except zero-delay calls, which wait for the next
        advance or :meth:`run_pending`. The clock reads each call's due time while that call
        runs, so callbacks observe the instant they were scheduled for.

        Args:
            dt: Milliseconds, or a duration unit, to advance by. Must not be
                negative.

        Returns:
            int: Number of callbacks invoked.

        Raises:
            ValueError: If ``dt`` is negative.
        """
        dt = to_millis(dt)
        if dt < 0:
            raise ValueError(f"Cannot move the clock backwards ({dt} ms)")

        target = self._now + dt
        fired = self._fire_due(target)
        self._now = target
        return fired

    def run_pending(self) -> int:
        """Fire every call due at the current clock reading."""
        return self._fire_due(self._now)

    def _fire_due(self, until: float) -> int:
        fired = 0
        barrier = next(self._seq)
        deferred: list[ScheduledCall] = []
        while self._queue and self._queue[0].due <= until:
            call = heapq.heappop(self._queue)
            if not call.active:
                continue
            if call.seq > barrier and call.due == call.scheduled_at:
                # zero-delay call scheduled by a callback of this drain
                deferred.append(call)
                continue
            self._now = max(self._now, call.due)
            call.fired = True
            call.callback()
            fired += 1

        for call in deferred:
            heapq.heappush(self._queue, call)
        return fired
