"""Unit family foundation for type-safe durations.

Each unit family is a distinct physical quantity. The first class in a
hierarchy that sets ``IS_FAMILY_ROOT`` becomes the ``ROOT`` of every subclass,
and operations are only allowed between units that share a ``ROOT``.

Example:
    >>> class Second(UnitFloat):
    ...     IS_FAMILY_ROOT = True  # ROOT of the time family
    >>> class Minute(Second):
    ...     SCALE_TO_SI = 60.0  # ROOT = Second
"""

from __future__ import annotations

from typing import ClassVar

Number = int | float


class Unit:
    """Base class for all unit types.

    Attributes:
        ROOT (ClassVar[type[Unit]]): Root class defining the unit family.
        SYMBOL (ClassVar[str]): Unit symbol for display purposes.
        IS_FAMILY_ROOT (ClassVar[bool]): Indicates if this class is a root unit.
    """

    __slots__ = ()

    ROOT: ClassVar[type[Unit]]
    SYMBOL: ClassVar[str] = ""
    IS_FAMILY_ROOT: ClassVar[bool] = False

    def __init_subclass__(cls, **kwargs):
        """Resolve the ROOT class from the first ancestor flagged as family root."""
        super().__init_subclass__(**kwargs)
        if "ROOT" in cls.__dict__ and cls.ROOT is not None:
            return

        if cls.__dict__.get("IS_FAMILY_ROOT", False):
            cls.ROOT = cls
            return

        for base in cls.mro()[1:]:
            if base.__dict__.get("IS_FAMILY_ROOT", False):
                cls.ROOT = base
                return

        cls.ROOT = cls

    @classmethod
    def _check_same_root(cls, unit_type: type):
        """Check that ``unit_type`` belongs to the same family.

        Raises:
            TypeError: If the units belong to different families, or
                ``unit_type`` is not a unit at all.
        """
        other_root = getattr(unit_type, "ROOT", None)
        if cls.ROOT is not other_root:
            msg = f"Incompatible units: {cls.ROOT.__name__} and {getattr(other_root, '__name__', unit_type.__name__)}"
            raise TypeError(msg)
