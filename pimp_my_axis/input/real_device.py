from __future__ import annotations
import errno
import threading
from collections import deque
from typing import Deque, Optional, Set

from evdev import InputDevice, ecodes

from ..domain.axis import Axis, AxisUpdate
from ..domain.devices import AxisSource
from ..errors import DeviceOpenError, DeviceReadFailure
from ..logging_config import get_logger
from .event_codes import axis_to_code, code_to_axis

log = get_logger(__name__)


class RealDevice(AxisSource):
    """A physical evdev input device observed under its configured name.

    The listener thread blocks in ``next_event`` while the propagation engine
    calls ``read`` for on-demand values; both only read the device. The lock
    serializes ``read`` against ``close``.
    """

    def __init__(self, name: str, path: str, device: InputDevice | None = None):
        self.name = name
        self.path = path
        if device is None:
            try:
                device = InputDevice(path)
            except OSError as e:
                raise DeviceOpenError(
                    f"Unable to open event device '{path}' for '{name}': {e}"
                ) from e
        self._device = device
        self._lock = threading.RLock()
        self._events = None
        self._pending: Deque[AxisUpdate] = deque()
        self._dropping = False
        self._closed = False
        self._abs_codes: Set[int] = set(
            device.capabilities(absinfo=False).get(ecodes.EV_ABS, [])
        )
        log.info("Opened event device '%s' (%s) as '%s'", path, device.name, name)

    def supports(self, axis: Axis) -> bool:
        return axis_to_code(axis) in self._abs_codes

    def read(self, axis: Axis) -> int:
        if not self.supports(axis):
            raise DeviceReadFailure(self.name, axis, "axis not supported by device")
        with self._lock:
            try:
                return self._device.absinfo(axis_to_code(axis)).value
            except OSError as e:
                raise DeviceReadFailure(self.name, axis, str(e)) from e

    def next_event(self) -> Optional[AxisUpdate]:
        if self._pending:
            return self._pending.popleft()
        if self._closed:
            return None
        if self._events is None:
            self._events = self._device.read_loop()
        try:
            for event in self._events:
                if event.type == ecodes.EV_SYN and event.code == ecodes.SYN_DROPPED:
                    # Kernel buffer overran; the rest of this packet is stale.
                    log.debug("Events dropped on '%s', resynchronizing", self.name)
                    self._dropping = True
                    continue
                if self._dropping:
                    if event.type == ecodes.EV_SYN and event.code == ecodes.SYN_REPORT:
                        self._dropping = False
                        self._resync()
                        if self._pending:
                            return self._pending.popleft()
                    continue
                if event.type != ecodes.EV_ABS:
                    continue
                axis = code_to_axis(event.code)
                if axis is None:
                    log.debug("Unhandled event code %d on '%s'", event.code, self.name)
                    continue
                return AxisUpdate(self.name, axis, event.value)
        except (OSError, ValueError) as e:
            if self._closed:
                log.debug("Event device '%s' (%s) was closed", self.path, self.name)
                return None
            if isinstance(e, OSError) and e.errno == errno.ENODEV:
                log.info("Event device '%s' (%s) was removed", self.path, self.name)
                return None
            raise
        return None

    def _resync(self) -> None:
        for code in sorted(self._abs_codes):
            axis = code_to_axis(code)
            if axis is None:
                continue
            try:
                self._pending.append(AxisUpdate(self.name, axis, self.read(axis)))
            except DeviceReadFailure as e:
                log.warning("Resynchronizing %s:%s failed: %s", self.name, axis, e)

    def close(self) -> None:
        with self._lock:
            self._closed = True
            try:
                self._device.close()
            except OSError as e:
                log.warning("Error closing device %s: %s", self.path, e)
