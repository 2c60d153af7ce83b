"""Float-based units stored in SI scale.

Classes:
    UnitFloat: Base class for float-based units with automatic SI conversion.

Example:
    >>> class Second(UnitFloat):
    ...     IS_FAMILY_ROOT = True
    ...     SYMBOL = "s"
    >>> class Millisecond(Second):
    ...     SCALE_TO_SI = 0.001
    ...     SYMBOL = "ms"
    >>> print(Millisecond(250))  # "250.0 ms"
    >>> print(float(Millisecond(250)))  # 0.25 (seconds in SI)
"""

from __future__ import annotations

from typing import ClassVar

from .unit_base import Number, Unit


class UnitFloat(float, Unit):
    """Float that stores its value in SI units and only mixes with its family.

    Attributes:
        SCALE_TO_SI (ClassVar[float]): Conversion factor to SI units.
    """

    SCALE_TO_SI: ClassVar[float] = 1.0
    IS_FAMILY_ROOT: ClassVar[bool] = True

    def __new__(cls, value: Number):
        """Create a new instance from a value in the unit's native scale.

        Args:
            value: Numeric value in the unit's native scale.
        """
        return float.__new__(cls, float(value) * cls.SCALE_TO_SI)

    @classmethod
    def from_si(cls, si_value: float) -> UnitFloat:
        """Create an instance directly from a value already in SI units."""
        return float.__new__(cls, si_value)

    def to(self, unit_type: type[UnitFloat]) -> float:
        """Convert to another unit of the same family.

        Args:
            unit_type: Target unit type to convert to.

        Returns:
            float: Value in the target unit's scale.

        Raises:
            TypeError: If ``unit_type`` is from another family.
        """
        self._check_same_root(unit_type)
        return float(self) / unit_type.SCALE_TO_SI

    def as_unit(self, unit_type: type[UnitFloat]) -> UnitFloat:
        """Convert to another unit of the same family, keeping unit type information."""
        self._check_same_root(unit_type)
        return unit_type.from_si(float(self))

    def __add__(self, other: UnitFloat) -> UnitFloat:
        self._check_same_root(type(other))
        return type(self).from_si(float(self) + float(other))

    def __radd__(self, other: UnitFloat) -> UnitFloat:
        return self.__add__(other)

    def __sub__(self, other: UnitFloat) -> UnitFloat:
        self._check_same_root(type(other))
        return type(self).from_si(float(self) - float(other))

    def __mul__(self, k: Number) -> UnitFloat:
        if isinstance(k, Number) and not isinstance(k, Unit):
            return type(self).from_si(float(self) * float(k))
        raise TypeError(f"Cannot scale {type(self).__name__} by {type(k).__name__}")

    def __rmul__(self, k: Number) -> UnitFloat:
        return self.__mul__(k)

    def __lt__(self, other: UnitFloat) -> bool:
        self._check_same_root(type(other))
        return float(self) < float(other)

    def __le__(self, other: UnitFloat) -> bool:
        self._check_same_root(type(other))
        return float(self) <= float(other)

    def __gt__(self, other: UnitFloat) -> bool:
        self._check_same_root(type(other))
        return float(self) > float(other)

    def __ge__(self, other: UnitFloat) -> bool:
        self._check_same_root(type(other))
        return float(self) >= float(other)

    __hash__ = float.__hash__

    def __str__(self) -> str:
        """Return the value and symbol in the unit's native scale (e.g. "1.5 s")."""
        return f"{self.to(type(self))} {type(self).SYMBOL}".strip()

    def __repr__(self) -> str:
        """Return the native value with its SI equivalent (e.g. "250 ms (= 0.25 SI)")."""
        return f"{self.to(type(self)):g} {type(self).SYMBOL} (= {float(self):g} SI)"
