"""Process-wide collection of live timers.

The registry is the only structure shared between timers. It owns the uid
counter, the identifier namespace, the insertion-ordered list of live timers,
the scheduling primitive and the clock. A single re-entrant lock guards all of
it, and every timer transition runs under the same lock, so timers may be
driven from scheduler threads and caller threads alike.

Invariants:
    • No two live timers share an ``id``, and no ``id`` equals another live
      timer's ``uid`` (``exists`` matches either).
    • ``uid`` values are strictly increasing and never reused within a registry.

A default registry is created on first use from :meth:`TimerConfig.from_env`.
Tests and embedding hosts replace it explicitly with :func:`set_registry` or
:func:`reset_registry`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from itertools import count
import threading
from typing import Any

from .config import TimerConfig, build_scheduler
from .logger import log
from .scheduler import Scheduler
from .timer import Timer

Clock = Callable[[], float]
Predicate = Callable[[Timer], bool]


class TimerRegistry:
    """Identifier namespace and live-instance collection for timers.

    Args:
        scheduler: Scheduling primitive timers delegate to. Built from
            ``config`` when omitted.
        clock: Millisecond clock used for pause/resume bookkeeping. Defaults
            to ``scheduler.now``.
        config: Configuration used to build the scheduler.

    Attributes:
        lock (threading.RLock): Guards the registry and every timer transition.
        scheduler (Scheduler): The scheduling primitive.
        config (TimerConfig): The configuration in effect.
    """

    def __init__(
        self,
        scheduler: Scheduler | None = None,
        clock: Clock | None = None,
        config: TimerConfig | None = None,
    ):
        self.config = config if config is not None else TimerConfig()
        self.scheduler = scheduler if scheduler is not None else build_scheduler(self.config)
        self._clock = clock
        self.lock = threading.RLock()
        self._timers: list[Timer] = []
        self._uids = count(1)

    def clock(self) -> float:
        """Current clock reading in milliseconds."""
        if self._clock is not None:
            return self._clock()
        return self.scheduler.now()

    def create(self, initial: Mapping[str, Any] | None = None, **properties: Any) -> Timer:
        """Create and register a timer.

        Args:
            initial: Optional property bag (``id``, ``delay``, ``repeat``...).
            **properties: Properties applied after ``initial``.

        Returns:
            Timer: The new, stopped timer.

        Raises:
            IdentifierConflict: If the requested id is already in use.

        Example:
            >>> heartbeat = registry.create(id="heartbeat", delay=1000, repeat=True)
        """
        return Timer(initial, registry=self, **properties)

    def all(self) -> list[Timer]:
        """Return a snapshot of the live timers in creation order."""
        with self.lock:
            return list(self._timers)

    def select(self, predicate: Predicate) -> Iterator[Timer]:
        """Lazily yield the live timers for which ``predicate`` is true."""
        return (timer for timer in self.all() if predicate(timer))

    def exists(self, identifier: Any) -> Timer | None:
        """Return the live timer whose ``id`` or ``uid`` equals ``identifier``."""
        return next(self.select(lambda timer: timer.id == identifier or timer.uid == identifier), None)

    def find_conflict(self, value: Any, exclude: Timer | None = None) -> Timer | None:
        """Return the live timer, other than ``exclude``, that would clash with ``value`` as an id."""
        with self.lock:
            for timer in self._timers:
                if timer is exclude:
                    continue
                if timer.id == value or timer.uid == value:
                    return timer
        return None

    def destroy_all(self) -> TimerRegistry:
        """Stop, unbind and flag every live timer as deleted, then empty the registry."""
        with self.lock:
            destroyed = len(self._timers)
            while self._timers:
                self._timers.pop()._teardown()
        if destroyed:
            log.debug("Destroyed %d timers", destroyed)
        return self

    def _next_uid(self) -> int:
        with self.lock:
            return next(self._uids)

    def _add(self, timer: Timer) -> None:
        with self.lock:
            self._timers.append(timer)

    def _remove(self, timer: Timer) -> bool:
        with self.lock:
            for index, record in enumerate(self._timers):
                if record is timer:
                    del self._timers[index]
                    return True
        return False

    def __len__(self) -> int:
        return len(self._timers)

    def __iter__(self) -> Iterator[Timer]:
        return iter(self.all())

    def __contains__(self, timer: object) -> bool:
        with self.lock:
            return any(record is timer for record in self._timers)

    def __repr__(self) -> str:
        return f"TimerRegistry(timers={len(self)}, scheduler={type(self.scheduler).__name__})"


_default: TimerRegistry | None = None
_default_lock = threading.Lock()


def get_registry() -> TimerRegistry:
    """Return the default registry, creating it from the environment on first use."""
    global _default
    with _default_lock:
        if _default is None:
            _default = TimerRegistry(config=TimerConfig.from_env())
        return _default


def set_registry(registry: TimerRegistry | None) -> TimerRegistry | None:
    """Install ``registry`` as the default and return the previous one (left untouched).

    Passing ``None`` makes the next :func:`get_registry` call build a fresh one.
    """
    global _default
    with _default_lock:
        previous, _default = _default, registry
    return previous


def reset_registry(registry: TimerRegistry | None = None) -> TimerRegistry:
    """Destroy every timer of the default registry and replace it.

    Args:
        registry: New default. A fresh registry built from the environment
            is used when omitted, which also restarts uid numbering.

    Returns:
        TimerRegistry: The new default registry.
    """
    global _default
    with _default_lock:
        previous = _default
        _default = registry if registry is not None else TimerRegistry(config=TimerConfig.from_env())
        current = _default
    if previous is not None:
        previous.destroy_all()
    log.info("Default timer registry reset (%r)", current)
    return current
