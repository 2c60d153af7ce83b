"""Pausable, repeatable timers over a one-shot scheduling primitive.

timerkit turns a host's single-shot delayed-callback facility (a thread timer,
an asyncio loop, or a virtual simulation clock) into timers with identity,
pause/resume, repeat and listener binding. Every timer belongs to a registry
that keeps identifiers unique and can enumerate or destroy its timers.

Package Components:
    Timers (timerkit.timer):
        • Timer: stopped/started/paused state machine with pause-aware delays
        • TimerStatus: Derived lifecycle state

    Registry (timerkit.registry):
        • TimerRegistry: Identifier namespace, live collection, lock and clock
        • get_registry / set_registry / reset_registry: Default registry control

    Scheduling (timerkit.scheduler):
        • ThreadingScheduler: Wall clock on ``threading.Timer``
        • AsyncioScheduler: ``loop.call_later``
        • ManualScheduler: Virtual clock advanced by the caller

    Support:
        • CallbackBus: Ordered listener list with error isolation
        • timerkit.unit: Duration units accepted as delays
        • timerkit.report: Rich tables of live timers
        • timerkit.config / timerkit.logger: Configuration and rich logging

Usage:
    >>> import timerkit
    >>> from timerkit.unit import Second
    >>> heartbeat = timerkit.create(id="heartbeat", delay=Second(5), repeat=True)
    >>> heartbeat.bind(lambda timer: print("beat", timer.id)).start()
    >>> heartbeat.pause()   # remembers the time left
    >>> heartbeat.resume()  # fires after the remainder, then every 5 s
    >>> timerkit.destroy_all()

Deterministic simulation:
    >>> scheduler = timerkit.ManualScheduler()
    >>> registry = timerkit.TimerRegistry(scheduler)
    >>> timer = registry.create(delay=100).bind(print).start()
    >>> scheduler.advance(100)  # prints the timer
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import Any

from .bus import CallbackBus
from .config import TimerConfig, build_scheduler
from .errors import IdentifierConflict, InvalidCallback, TimerError
from .logger import configure_logging
from .registry import TimerRegistry, get_registry, reset_registry, set_registry
from .scheduler import AsyncioScheduler, ManualScheduler, Scheduler, ThreadingScheduler
from .timer import Timer, TimerStatus

__version__ = "0.1.0"


def create(initial: Mapping[str, Any] | None = None, **properties: Any) -> Timer:
    """Create a timer in the default registry."""
    return get_registry().create(initial, **properties)


def all_timers() -> list[Timer]:
    """Return the live timers of the default registry."""
    return get_registry().all()


def select(predicate: Callable[[Timer], bool]) -> Iterator[Timer]:
    """Lazily yield default-registry timers matching ``predicate``."""
    return get_registry().select(predicate)


def exists(identifier: Any) -> Timer | None:
    """Look a timer up by ``id`` or ``uid`` in the default registry."""
    return get_registry().exists(identifier)


def destroy_all() -> TimerRegistry:
    """Destroy every timer of the default registry."""
    return get_registry().destroy_all()


__all__ = [
    "Timer",
    "TimerStatus",
    "TimerRegistry",
    "CallbackBus",
    "Scheduler",
    "ThreadingScheduler",
    "AsyncioScheduler",
    "ManualScheduler",
    "TimerConfig",
    "build_scheduler",
    "TimerError",
    "IdentifierConflict",
    "InvalidCallback",
    "configure_logging",
    "get_registry",
    "set_registry",
    "reset_registry",
    "create",
    "all_timers",
    "select",
    "exists",
    "destroy_all",
]
