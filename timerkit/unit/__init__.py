"""Duration units for timer delays and virtual clocks.

Architecture:
    - unit_base: Foundation Unit class with family management
    - unit_float: Float-based units with automatic SI conversion
    - unit_time: Time units (Second, Millisecond, Minute, Hour)

Example:
    >>> from timerkit.unit import Second, Millisecond
    >>> timer.delay = Second(2)  # stored as 2000 ms
    >>> scheduler.advance(Millisecond(500))
"""

from .unit_base import Unit
from .unit_float import UnitFloat
from .unit_time import Hour, Millisecond, Minute, Second, Time

__all__ = [
    "Unit",
    "UnitFloat",
    "Second",
    "Millisecond",
    "Minute",
    "Hour",
    "Time",
]
