from __future__ import annotations
import threading

from evdev import AbsInfo, UInput, ecodes
from evdev.uinput import UInputError

from ..domain.axis import Axis
from ..domain.config import VirtDeviceConfig
from ..domain.devices import AxisSink
from ..errors import DeviceOpenError, SinkWriteFailure
from ..input.event_codes import axis_to_code
from ..logging_config import get_logger

log = get_logger(__name__)


class VirtDevice(AxisSink):
    """A uinput device exposing the configured virtual axes.

    Several virtual axes share one device, so writes are serialized.
    """

    def __init__(self, name: str, config: VirtDeviceConfig, uinput: UInput | None = None):
        self.name = name
        self.config = config
        if uinput is None:
            uinput = self._create(config)
        self._uinput = uinput
        self._lock = threading.Lock()
        log.info("Created uinput virtual device '%s' for '%s'", config.name, name)

    @staticmethod
    def _create(config: VirtDeviceConfig) -> UInput:
        abs_events = [
            (
                axis_to_code(axis),
                AbsInfo(
                    value=(axis_config.min + axis_config.max) // 2,
                    min=axis_config.min,
                    max=axis_config.max,
                    fuzz=0,
                    flat=0,
                    resolution=0,
                ),
            )
            for axis, axis_config in config.axes.items()
        ]
        try:
            return UInput(
                {ecodes.EV_ABS: abs_events},
                name=config.name,
                vendor=config.vendor_id,
                product=config.product_id,
            )
        except (UInputError, OSError) as e:
            raise DeviceOpenError(
                f"Unable to create virtual device '{config.name}': {e}"
            ) from e

    def write(self, axis: Axis, value: int) -> None:
        if axis not in self.config.axes:
            raise SinkWriteFailure(self.name, axis, "axis not configured on device")
        with self._lock:
            try:
                self._uinput.write(ecodes.EV_ABS, axis_to_code(axis), value)
                self._uinput.syn()
            except OSError as e:
                raise SinkWriteFailure(self.name, axis, str(e)) from e

    def close(self) -> None:
        with self._lock:
            self._uinput.close()
