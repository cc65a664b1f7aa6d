"""Locating physical event devices for the configured matchers."""

from __future__ import annotations
from typing import Dict, Mapping, Tuple

from evdev import InputDevice, list_devices

from ..domain.config import DeviceMatcher
from ..errors import DeviceOpenError
from ..logging_config import get_logger

log = get_logger(__name__)


def find_event_devices() -> Dict[Tuple[int, int], str]:
    """Map (vendor id, product id) to event device path for readable devices."""
    found: Dict[Tuple[int, int], str] = {}
    for path in list_devices():
        try:
            dev = InputDevice(path)
        except OSError as e:
            log.debug("Event device '%s' cannot be opened. Ignoring: %s", path, e)
            continue
        try:
            vendor_id, product_id = dev.info.vendor, dev.info.product
        finally:
            dev.close()
        if not vendor_id and not product_id:
            log.debug("Event device '%s' does not have known IDs. Ignoring.", path)
            continue
        log.debug(
            "Found event device '%s' with IDs '%04x:%04x'.", path, vendor_id, product_id
        )
        found.setdefault((vendor_id, product_id), path)
    return found


def resolve_matcher(
    matcher: DeviceMatcher, available: Mapping[Tuple[int, int], str]
) -> str:
    """Return the event device path selected by ``matcher``."""
    if matcher.path is not None:
        return matcher.path
    path = available.get((matcher.vendor_id, matcher.product_id))
    if path is None:
        raise DeviceOpenError(f"No device with IDs '{matcher}' was found")
    log.debug("Using path '%s' for matcher %s", path, matcher)
    return path
