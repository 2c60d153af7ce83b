"""Pausable, repeatable one-shot timers.

A :class:`Timer` owns at most one pending fire event. Starting it asks the
registry's scheduler to call back after ``delay`` milliseconds; when that
happens the timer returns to ``stopped``, notifies its listeners in bind order
and, if ``repeat`` is set, starts a fresh full-length cycle. Periodic behavior
is therefore a chain of independent one-shot schedules.

States:
    stopped: Nothing scheduled, no timing bookkeeping (initial state).
    started: A one-shot fire is pending.
    paused: Nothing scheduled, but the remaining delay is remembered.

Transitions:
    start:   stopped -> started (inline fire when there is no delay),
             paused -> started (same as resume), started -> started (no-op)
    stop:    started | paused -> stopped
    pause:   started -> paused
    resume:  paused -> started
    fire:    started -> stopped, then listeners, then start again on repeat

``deleted`` is a terminal flag set by :meth:`Timer.destroy`. Once set, no
fire notification is delivered, even for a schedule that was already in
flight.

Example:
    >>> scheduler = ManualScheduler()
    >>> registry = TimerRegistry(scheduler)
    >>> timer = registry.create(delay=100).bind(lambda t: print(t.status))
    >>> timer.start().status
    <TimerStatus.STARTED: 'started'>
    >>> scheduler.advance(100)
    stopped
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import TYPE_CHECKING, Any

from .bus import CallbackBus, Listener
from .errors import IdentifierConflict
from .logger import log
from .unit import Second

if TYPE_CHECKING:
    from .registry import TimerRegistry


class TimerStatus(str, Enum):
    """Derived lifecycle state of a timer."""

    STOPPED = "stopped"
    STARTED = "started"
    PAUSED = "paused"


_UNSET: Any = object()

_READ_ONLY = frozenset({"uid", "status", "deleted", "last_run", "remaining_delay", "registry", "callbacks"})


def normalize_delay(value: Any) -> int | None:
    """Normalize a delay to a positive whole number of milliseconds.

    Numbers are truncated, numeric strings are parsed, and duration units are
    rounded to the nearest millisecond. Anything that is not a positive integer
    after that (``None``, booleans, ``0``, negatives, NaN, garbage) becomes
    ``None``, meaning "fire as soon as started".

    Example:
        >>> normalize_delay("250"), normalize_delay(99.9), normalize_delay(Second(2))
        (250, 99, 2000)
        >>> normalize_delay(0), normalize_delay("soon")
        (None, None)
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Second):
        value = round(value.millis())

    try:
        delay = int(value)
    except (TypeError, ValueError):
        try:
            delay = int(float(value))
        except (TypeError, ValueError, OverflowError):
            return None
    except OverflowError:
        return None

    return delay if delay >= 1 else None


def normalize_repeat(value: Any) -> bool:
    """Coerce ``value`` to ``bool``; values that refuse coercion count as ``False``."""
    try:
        return bool(value)
    except Exception:
        return False


class Timer:
    """A schedulable entity with identity, delay, repeat flag and listeners.

    Timers are normally created through :meth:`TimerRegistry.create`.
    Constructing one directly registers it with ``registry`` (or the default
    registry) the same way.

    Args:
        initial: Optional property bag applied through :meth:`from_dict`.
        registry: Registry to join. Defaults to :func:`get_registry`.
        **properties: Extra properties, applied after ``initial``.

    Raises:
        IdentifierConflict: If the requested id, or the default id (the uid),
            is already used by a live timer. The timer is not registered.

    Attributes:
        _uid (int): Immutable process-unique number.
        _id (Any): Caller-facing identifier, unique among live timers.
        _delay (int | None): Delay in milliseconds, ``None`` for immediate.
        _repeat (bool): Restart automatically after each fire.
        _handle (Any): Pending scheduler handle, ``None`` when nothing is pending.
        _generation (int): Cycle counter; a fire carrying a stale value is dropped.
        _last_run (float | None): Clock reading the current cycle is measured from.
        _remaining_delay (float | None): Delay left when paused.
        _deleted (bool): Set once by :meth:`destroy`.
    """

    def __init__(
        self,
        initial: Mapping[str, Any] | None = None,
        *,
        registry: TimerRegistry | None = None,
        **properties: Any,
    ):
        if registry is None:
            from .registry import get_registry

            registry = get_registry()

        self._registry = registry
        self._id = _UNSET
        self._delay: int | None = None
        self._repeat = False
        self._deleted = False
        self._handle: Any = None
        self._generation = 0
        self._last_run: float | None = None
        self._remaining_delay: float | None = None
        self._bus = CallbackBus()

        values = dict(initial or {})
        values.update(properties)

        with registry.lock:
            self._uid = registry._next_uid()
            self.from_dict(values)
            if self._id is _UNSET:
                self.id = self._uid
            registry._add(self)

        log.debug("Created timer uid=%d id=%r delay=%r repeat=%r", self._uid, self._id, self._delay, self._repeat)

    # ------------------------------------------------------------------ properties
    @property
    def uid(self) -> int:
        return self._uid

    @property
    def id(self) -> Any:
        return self._id

    @id.setter
    def id(self, value: Any) -> None:
        ok, conflicting = self.try_set_id(value)
        if not ok:
            raise IdentifierConflict(value, conflicting)

    @property
    def delay(self) -> int | None:
        return self._delay

    @delay.setter
    def delay(self, value: Any) -> None:
        self._delay = normalize_delay(value)

    @property
    def repeat(self) -> bool:
        return self._repeat

    @repeat.setter
    def repeat(self, value: Any) -> None:
        self._repeat = normalize_repeat(value)

    @property
    def status(self) -> TimerStatus:
        """Current state, derived from the pending handle and the bookkeeping."""
        if self._handle is not None:
            return TimerStatus.STARTED
        if self._last_run is None:
            return TimerStatus.STOPPED
        return TimerStatus.PAUSED

    @property
    def deleted(self) -> bool:
        return self._deleted

    @property
    def last_run(self) -> float | None:
        return self._last_run

    @property
    def remaining_delay(self) -> float | None:
        return self._remaining_delay

    @property
    def registry(self) -> TimerRegistry:
        return self._registry

    @property
    def callbacks(self) -> tuple[Listener, ...]:
        return tuple(self._bus)

    @property
    def _lock(self):
        return self._registry.lock

    def try_set_id(self, value: Any) -> tuple[bool, Timer | None]:
        """Assign ``id`` without raising.

        Returns:
            tuple[bool, Timer | None]: ``(True, None)`` when the id was set (or
            was already ``value``), ``(False, conflicting)`` otherwise. The
            current id is unchanged on failure.
        """
        with self._lock:
            if value == self._id:
                return True, None
            conflicting = self._registry.find_conflict(value, exclude=self)
            if conflicting is not None:
                return False, conflicting
            self._id = value
        return True, None

    # ------------------------------------------------------------------ transitions
    def start(self) -> Timer:
        """Start (or resume) the timer.

        From ``stopped`` a new full-length cycle begins; a timer without delay
        fires right away. From ``paused`` this is :meth:`resume`. From
        ``started`` nothing happens.
        """
        return self._start(deferred=False)

    def stop(self) -> Timer:
        """Cancel the pending fire and forget any paused progress."""
        with self._lock:
            if self.status is TimerStatus.STOPPED:
                return self
            self._cancel()
            self._last_run = None
            self._remaining_delay = None
            log.debug("Timer %r stopped", self._id)
        return self

    def restart(self) -> Timer:
        """Stop, then start a fresh full-length cycle."""
        self.stop()
        return self.start()

    def pause(self) -> Timer:
        """Cancel the pending fire and remember how much delay is left.

        Only a started timer can be paused; otherwise this is a no-op.
        """
        with self._lock:
            if self.status is not TimerStatus.STARTED:
                return self
            self._cancel()
            elapsed = self._registry.clock() - self._last_run
            self._remaining_delay = (self._delay or 0) - elapsed
            log.debug("Timer %r paused with %.3f ms left", self._id, self._remaining_delay)
        return self

    def resume(self) -> Timer:
        """Continue a paused timer with the delay it had left.

        If nothing is left the timer fires immediately. Only a paused timer can
        be resumed; otherwise this is a no-op.
        """
        with self._lock:
            if self._refuse("resume") or self.status is not TimerStatus.PAUSED:
                return self
            generation = self._resume_cycle()
        if generation is not None:
            self._fire(generation)
        return self

    def destroy(self) -> Timer:
        """Stop, unbind everything, flag as deleted and leave the registry.

        Safe to call while a fire is in flight: the deleted flag is checked
        when the fire arrives, so no listener runs afterwards. Calling it again
        does nothing.
        """
        with self._lock:
            if self._deleted:
                return self
            self._teardown()
            self._registry._remove(self)
        log.debug("Timer %r destroyed", self._id)
        return self

    # ------------------------------------------------------------------ listeners
    def bind(self, callback: Listener) -> Timer:
        """Add a listener called with the timer on every fire.

        Raises:
            InvalidCallback: If ``callback`` is not callable.
        """
        with self._lock:
            self._bus.bind(callback)
        return self

    def unbind(self, callback: Listener) -> Timer:
        """Remove every binding of ``callback``."""
        with self._lock:
            self._bus.unbind(callback)
        return self

    def unbind_all(self) -> Timer:
        with self._lock:
            self._bus.unbind_all()
        return self

    def is_bound(self) -> bool:
        return self._bus.is_bound()

    # ------------------------------------------------------------------ serialization
    def to_dict(self) -> dict[str, Any]:
        """Return ``{"id": ..., "status": ...}``; delay, repeat and listeners are not included."""
        return {"id": self._id, "status": self.status.value}

    def from_dict(self, values: Mapping[str, Any] | None) -> Timer:
        """Assign each key of ``values`` as an attribute.

        ``id``, ``delay`` and ``repeat`` go through their validating setters.
        Other keys become plain attributes, except private names, read-only
        properties (``status``, ``uid``...) and methods, which are skipped.

        Raises:
            IdentifierConflict: If ``values["id"]`` is taken.
        """
        if not values:
            return self
        for key, value in values.items():
            if key.startswith("_") or key in _READ_ONLY or callable(getattr(type(self), key, None)):
                log.debug("Timer %r ignores protected key %r", self._id, key)
                continue
            setattr(self, key, value)
        return self

    # ------------------------------------------------------------------ internals
    def _start(self, deferred: bool) -> Timer:
        with self._lock:
            if self._refuse("start", quiet=deferred):
                return self
            status = self.status
            if status is TimerStatus.STARTED:
                return self
            if status is TimerStatus.PAUSED:
                generation = self._resume_cycle()
            else:
                generation = self._begin_cycle(deferred)
        if generation is not None:
            self._fire(generation)
        return self

    def _begin_cycle(self, deferred: bool) -> int | None:
        """Schedule a full-length cycle.

        Returns the generation to fire inline with when there is no delay and
        the call is not ``deferred``, otherwise ``None``.
        """
        if self._delay is None and not deferred:
            return self._generation
        self._last_run = self._registry.clock()
        self._schedule(self._delay or 0)
        log.debug("Timer %r started for %d ms", self._id, self._delay or 0)
        return None

    def _resume_cycle(self) -> int | None:
        remaining = self._remaining_delay or 0
        if remaining <= 0:
            return self._generation
        self._last_run = self._registry.clock() + remaining - (self._delay or 0)
        self._schedule(remaining)
        log.debug("Timer %r resumed with %.3f ms left", self._id, remaining)
        return None

    def _schedule(self, delay: float) -> None:
        self._generation += 1
        generation = self._generation
        self._handle = self._registry.scheduler.schedule_once(delay, lambda: self._fire(generation))

    def _cancel(self) -> None:
        if self._handle is not None:
            self._registry.scheduler.cancel(self._handle)
            self._handle = None
        self._generation += 1

    def _teardown(self) -> None:
        self.stop()
        self._bus.unbind_all()
        self._deleted = True

    def _refuse(self, action: str, quiet: bool = False) -> bool:
        if self._deleted and not quiet:
            log.warning("Ignoring %s() on destroyed timer %r", action, self._id)
        return self._deleted

    def _fire(self, generation: int) -> None:
        with self._lock:
            if self._deleted or generation != self._generation:
                return
            self._handle = None
            self._generation += 1
            self._last_run = None
            self._remaining_delay = None
            log.debug("Timer %r fired", self._id)

        self._bus.notify(self)

        if self._repeat:
            self._start(deferred=True)

    def __repr__(self) -> str:
        return (
            f"Timer(uid={self._uid}, id={self._id!r}, status={self.status.value!r}, "
            f"delay={self._delay!r}, repeat={self._repeat!r})"
        )
