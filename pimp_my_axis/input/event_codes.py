"""Mapping between canonical axes and Linux ``EV_ABS`` event codes."""

from __future__ import annotations
from typing import Dict, Optional

from evdev import ecodes

from ..domain.axis import Axis

AXIS_CODES: Dict[Axis, int] = {
    Axis.X: ecodes.ABS_X,
    Axis.Y: ecodes.ABS_Y,
    Axis.Z: ecodes.ABS_Z,
    Axis.RX: ecodes.ABS_RX,
    Axis.RY: ecodes.ABS_RY,
    Axis.RZ: ecodes.ABS_RZ,
    Axis.THROTTLE: ecodes.ABS_THROTTLE,
    Axis.RUDDER: ecodes.ABS_RUDDER,
    Axis.WHEEL: ecodes.ABS_WHEEL,
    Axis.GAS: ecodes.ABS_GAS,
    Axis.BRAKE: ecodes.ABS_BRAKE,
}

CODE_AXES: Dict[int, Axis] = {code: axis for axis, code in AXIS_CODES.items()}


def axis_to_code(axis: Axis) -> int:
    return AXIS_CODES[axis]


def code_to_axis(code: int) -> Optional[Axis]:
    return CODE_AXES.get(code)
