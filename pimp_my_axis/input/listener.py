from __future__ import annotations
import threading
from queue import SimpleQueue
from typing import Iterator, Optional, Union

from ..domain.axis import AxisUpdate
from ..domain.devices import AxisSource
from ..logging_config import get_logger

log = get_logger(__name__)

_END = object()


class UpdateChannel:
    """Unbounded, ordered multi-producer / single-consumer update queue.

    Producers register up front with ``open_producer`` and call
    ``close_producer`` when their device stops. The consumer sees end of
    stream once every registered producer has closed.
    """

    def __init__(self):
        self._queue: SimpleQueue[Union[AxisUpdate, object]] = SimpleQueue()
        self._lock = threading.Lock()
        self._open = 0

    def open_producer(self) -> None:
        with self._lock:
            self._open += 1

    def close_producer(self) -> None:
        self._queue.put(_END)

    def send(self, update: AxisUpdate) -> None:
        self._queue.put(update)

    def receive(self) -> Optional[AxisUpdate]:
        """Block for the next update, ``None`` once all producers closed."""
        while True:
            with self._lock:
                if self._open == 0:
                    return None
            item = self._queue.get()
            if item is _END:
                with self._lock:
                    self._open -= 1
                continue
            return item

    def pending(self) -> int:
        return self._queue.qsize()

    def __iter__(self) -> Iterator[AxisUpdate]:
        while True:
            update = self.receive()
            if update is None:
                return
            yield update


class DeviceListener:
    """Forwards the updates of one physical device into an ``UpdateChannel``."""

    def __init__(self, device: AxisSource, channel: UpdateChannel):
        self._device = device
        self._channel = channel
        self._thread: Optional[threading.Thread] = None
        channel.open_producer()

    def start(self) -> bool:
        if self._thread and self._thread.is_alive():
            return False
        self._thread = threading.Thread(
            target=self._listen_loop,
            name=f"listener-{self._device.name}",
            daemon=True,
        )
        self._thread.start()
        return True

    def join(self, timeout: float | None = None) -> None:
        if self._thread:
            self._thread.join(timeout)

    def _listen_loop(self):
        log.debug("Listener thread for device %s started.", self._device.name)
        try:
            for update in iter(self._device.next_event, None):
                log.debug("Forwarding update %s=%d.", update.key, update.new_value)
                self._channel.send(update)
        except Exception:
            log.exception("Listener for device %s failed", self._device.name)
        finally:
            self._channel.close_producer()
            log.debug("Listener thread for device %s finished.", self._device.name)
