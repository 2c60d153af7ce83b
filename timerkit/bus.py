"""Ordered listener list owned by a single timer.

Listeners run in bind order. A listener that raises is logged and collected,
and the remaining listeners still run.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

from .errors import InvalidCallback
from .logger import log

Listener = Callable[..., Any]


class CallbackBus:
    """Ordered list of listener callbacks.

    The same callable may be bound several times; it then runs once per
    binding. Iteration and notification work on a snapshot, so listeners may
    bind or unbind while a notification is in progress without affecting it.
    """

    def __init__(self):
        self._listeners: list[Listener] = []

    def bind(self, callback: Listener) -> None:
        """Append ``callback`` to the list.

        Raises:
            InvalidCallback: If ``callback`` is not callable.
        """
        if not callable(callback):
            raise InvalidCallback(callback)
        self._listeners.append(callback)

    def unbind(self, callback: Listener) -> int:
        """Remove every entry matching ``callback``.

        Plain functions match by identity. Bound methods match when they bind
        the same function to the same object, since each attribute access
        creates a new method object.

        Returns:
            int: Number of entries removed.
        """
        kept = [listener for listener in self._listeners if listener != callback]
        removed = len(self._listeners) - len(kept)
        self._listeners[:] = kept
        return removed

    def unbind_all(self) -> None:
        self._listeners.clear()

    def is_bound(self) -> bool:
        return len(self._listeners) > 0

    def notify(self, *args: Any) -> list[Exception]:
        """Invoke every listener in bind order with ``args``.

        Returns:
            list[Exception]: Errors raised by listeners, in call order.
        """
        errors: list[Exception] = []
        for listener in list(self._listeners):
            try:
                listener(*args)
            except Exception as e:
                log.exception("Listener %r failed", listener)
                errors.append(e)
        return errors

    def __len__(self) -> int:
        return len(self._listeners)

    def __iter__(self) -> Iterator[Listener]:
        return iter(list(self._listeners))
