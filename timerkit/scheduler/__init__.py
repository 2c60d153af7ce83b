"""Scheduling primitives that timers delegate to.

Exports:
    Scheduler: Protocol every adapter satisfies
    ThreadingScheduler: Wall-clock adapter on ``threading.Timer``
    AsyncioScheduler: Adapter on ``loop.call_later``
    ManualScheduler: Virtual clock advanced explicitly
    ScheduledCall: Handle returned by ``ManualScheduler``
"""

from .asyncio_scheduler import AsyncioScheduler
from .base import Callback, Scheduler, to_millis
from .manual import ManualScheduler, ScheduledCall
from .threaded import ThreadingScheduler

__all__ = [
    "Scheduler",
    "Callback",
    "ThreadingScheduler",
    "AsyncioScheduler",
    "ManualScheduler",
    "ScheduledCall",
    "to_millis",
]
