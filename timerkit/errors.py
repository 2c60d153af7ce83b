"""Exception taxonomy for timerkit.

Both errors are deterministic and surface synchronously to the caller of the
operation that triggered them; nothing is retried internally.

Classes:
    TimerError: Base class for every error raised by this package.
    IdentifierConflict: An ``id`` collides with another live timer.
    InvalidCallback: ``bind`` was given something that is not callable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .timer import Timer


class TimerError(Exception):
    """Base class for timerkit errors."""


class IdentifierConflict(TimerError):
    """Raised when assigning an identifier already used by a live timer.

    The assignment (or construction) is rejected and the prior state of the
    timer is left unchanged.

    Attributes:
        identifier: The rejected identifier value.
        conflicting: The live timer that already owns ``identifier``.
    """

    def __init__(self, identifier: Any, conflicting: Timer | None = None):
        self.identifier = identifier
        self.conflicting = conflicting
        super().__init__(f"There is already a timer with id {identifier!r}")


class InvalidCallback(TimerError, TypeError):
    """Raised when binding a value that is not callable.

    Attributes:
        callback: The rejected value.
    """

    def __init__(self, callback: Any):
        self.callback = callback
        super().__init__(f"Not a valid callback: {callback!r}")
