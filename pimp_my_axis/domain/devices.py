"""Capability contracts between the propagation core and device I/O.

The core never talks to evdev directly. Physical devices are seen as
``AxisSource`` objects and virtual output devices as ``AxisSink`` objects, so
the graph and engine can be driven by in-memory fakes in tests.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from .axis import Axis, AxisUpdate


class AxisSource(ABC):
    """Read access to the axes of one physical device."""

    name: str

    @abstractmethod
    def supports(self, axis: Axis) -> bool:
        """Whether the device reports values for ``axis``."""
        pass

    @abstractmethod
    def read(self, axis: Axis) -> int:
        """Return the current value of ``axis``.

        Raises:
            DeviceReadFailure: the axis is not supported or the read failed
        """
        pass

    @abstractmethod
    def next_event(self) -> Optional[AxisUpdate]:
        """Block until the device reports an axis change.

        Returns ``None`` once the device will produce no more events.
        """
        pass


class AxisSink(ABC):
    """Write access to the axes of one virtual device."""

    name: str

    @abstractmethod
    def write(self, axis: Axis, value: int) -> None:
        """Emit ``value`` on ``axis``.

        Raises:
            SinkWriteFailure: the device rejected the write
        """
        pass
