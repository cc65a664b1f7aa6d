"""
Axis identities shared by the parser, the dependency graph and the devices.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional


class Axis(str, Enum):
    """The canonical absolute axes that can be read and written.

    Values are the exact, case-sensitive names used in expressions and in
    the configuration file.
    """

    X = "X"
    Y = "Y"
    Z = "Z"
    RX = "RX"
    RY = "RY"
    RZ = "RZ"
    THROTTLE = "Throttle"
    RUDDER = "Rudder"
    WHEEL = "Wheel"
    GAS = "Gas"
    BRAKE = "Brake"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: str) -> Optional["Axis"]:
        """Look up an axis by its canonical name, ``None`` if there is none."""
        try:
            return cls(name)
        except ValueError:
            return None


class AxisKey(NamedTuple):
    """(device name, axis) pair identifying one axis of one device."""

    device: str
    axis: Axis

    def __str__(self) -> str:
        return f"{self.device}:{self.axis}"


@dataclass(frozen=True)
class AxisUpdate:
    """A new value reported by a physical device for one of its axes."""

    device: str
    axis: Axis
    new_value: int

    @property
    def key(self) -> AxisKey:
        return AxisKey(self.device, self.axis)
