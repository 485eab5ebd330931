"""Tool communication settings."""

from __future__ import annotations

from enum import IntEnum
from typing import Generic, TypeVar

T = TypeVar("T", int, float)


class ToolVoltage(IntEnum):
    OFF = 0
    VOLTAGE_12V = 12
    VOLTAGE_24V = 24


class Parity(IntEnum):
    NONE = 0
    ODD = 1
    EVEN = 2


class Limited(Generic[T]):
    """A value constrained to the closed range ``[lower, upper]``.

    The value starts at ``lower``; assigning outside the range raises ValueError.
    """

    def __init__(self, lower: T, upper: T) -> None:
        self._lower = lower
        self._upper = upper
        self._data = lower

    @property
    def lower(self) -> T:
        return self._lower

    @property
    def upper(self) -> T:
        return self._upper

    @property
    def data(self) -> T:
        return self._data

    @data.setter
    def data(self, value: T) -> None:
        if not self._lower <= value <= self._upper:
            raise ValueError("Given data is out of range")
        self._data = value

    def __repr__(self) -> str:
        return f"Limited(lower={self._lower!r}, upper={self._upper!r}, data={self._data!r})"