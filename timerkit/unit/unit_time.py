"""Time unit definitions used for timer delays.

All time units derive from :class:`Second`, the SI root of the family. Timers
count in whole milliseconds, so every unit exposes :meth:`Second.millis`.

Classes:
    Second: Base time unit in seconds (SI unit).
    Millisecond: 1/1000 of a second, the native timer resolution.
    Minute: 60 seconds.
    Hour: 3600 seconds.

Type Aliases:
    Time: Union type for all time units.

Example:
    >>> delay = Minute(1.5)
    >>> print(delay)  # "1.5 min"
    >>> delay.millis()  # 90000.0
"""

from __future__ import annotations

from .unit_float import UnitFloat


class Second(UnitFloat):
    """Time unit: Second (SI base unit for time)."""

    IS_FAMILY_ROOT = True
    SCALE_TO_SI = 1.0
    SYMBOL = "s"

    def millis(self) -> float:
        """Return the duration in milliseconds.

        Returns:
            float: Duration expressed in milliseconds, the unit timer delays
                and scheduler clocks use.
        """
        return self.to(Millisecond)


class Millisecond(Second):
    """Time unit: Millisecond (0.001 seconds)."""

    SCALE_TO_SI = 0.001
    SYMBOL = "ms"


class Minute(Second):
    """Time unit: Minute (60 seconds)."""

    SCALE_TO_SI = 60.0
    SYMBOL = "min"


class Hour(Second):
    """Time unit: Hour (3600 seconds)."""

    SCALE_TO_SI = 3600.0
    SYMBOL = "h"


Time = Second | Millisecond | Minute | Hour  # Type alias for any time unit
