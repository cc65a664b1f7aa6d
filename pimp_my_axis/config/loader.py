"""Loading the JSON configuration file.

Example document::

    {
      "real_devices": {
        "stick": "/dev/input/by-id/usb-Thrustmaster_T.16000M-event-joystick",
        "pedals": {"vendor_id": "044f", "product_id": "b679"}
      },
      "virt_devices": {
        "combined": {
          "name": "Combined Rudder",
          "axes": {
            "Z": {"min": -255, "max": 255, "expr": "pedals:RX - pedals:RY"}
          }
        }
      }
    }

Expressions are parsed here, so a malformed expression rejects the whole
configuration before any device is touched.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from .settings import (
    DEFAULT_PRODUCT_ID,
    DEFAULT_VENDOR_ID,
    DEFAULT_VIRT_NAME,
    LEGACY_CONFIG_FILE_NAME,
    SYSTEM_CONFIG_FILE,
    user_config_file,
)
from ..domain.axis import Axis
from ..domain.config import AxisConfig, Config, DeviceMatcher, VirtDeviceConfig
from ..domain.parser import DEVICE_NAME, parse_expression
from ..errors import ConfigurationError, ExpressionError, InvalidConfig
from ..logging_config import get_logger

log = get_logger(__name__)


def find_config_file(explicit: Optional[str | Path] = None) -> Path:
    """Pick the configuration file to use.

    Order: ``explicit``, the per-user file, the system-wide file.

    Only JSON is read. A ``config.yml`` left in one of the search locations
    is reported so it can be converted instead of being silently ignored.
    """
    if explicit is not None:
        return Path(explicit)
    candidates = (user_config_file(), SYSTEM_CONFIG_FILE)
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    for candidate in candidates:
        legacy = candidate.with_name(LEGACY_CONFIG_FILE_NAME)
        if legacy.is_file():
            raise ConfigurationError(
                f"Found YAML config '{legacy}' but only JSON is supported; "
                f"convert it to '{candidate}'"
            )
    raise ConfigurationError(
        f"Found no config file (looked for {user_config_file()} and {SYSTEM_CONFIG_FILE})"
    )


def load_config(path: str | Path) -> Config:
    path = Path(path)
    if path.suffix in (".yml", ".yaml"):
        raise InvalidConfig(
            f"Config file '{path}' is YAML; only JSON configuration is supported"
        )
    log.info("Reading config file '%s'", path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigurationError(f"Unable to read config file '{path}': {e}") from e
    except json.JSONDecodeError as e:
        raise InvalidConfig(f"Config file '{path}' is not valid JSON: {e}") from e
    return parse_config(data)


def parse_config(data: Any) -> Config:
    """Build a typed :class:`Config` from a decoded JSON document."""
    if not isinstance(data, dict):
        raise InvalidConfig("Configuration must be a JSON object")

    real_section = _section(data, "real_devices")
    virt_section = _section(data, "virt_devices")

    real_devices = {
        name: _parse_matcher(name, entry) for name, entry in real_section.items()
    }
    virt_devices = {
        name: _parse_virt_device(name, entry) for name, entry in virt_section.items()
    }
    return Config(real_devices=real_devices, virt_devices=virt_devices)


def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    section = data.get(key, {})
    if not isinstance(section, dict):
        raise InvalidConfig(f"'{key}' must be an object mapping names to devices")
    return section


def _parse_matcher(name: str, entry: Any) -> DeviceMatcher:
    if not DEVICE_NAME.fullmatch(name):
        raise InvalidConfig(
            f"real_devices: '{name}' cannot be used in expressions; device names "
            "may not contain whitespace, ':', parentheses or operators"
        )
    if isinstance(entry, str):
        return DeviceMatcher(path=entry)
    where = f"real_devices.{name}"
    if not isinstance(entry, dict):
        raise InvalidConfig(f"{where}: expected a path or an object")
    path = entry.get("path")
    vendor_id = _parse_id(where, "vendor_id", entry.get("vendor_id"))
    product_id = _parse_id(where, "product_id", entry.get("product_id"))
    try:
        return DeviceMatcher(
            path=str(path) if path is not None else None,
            vendor_id=vendor_id,
            product_id=product_id,
        )
    except InvalidConfig as e:
        raise InvalidConfig(f"{where}: {e}") from None


def _parse_id(where: str, field: str, value: Any, default: Optional[int] = None) -> Optional[int]:
    """Accept an int or a hexadecimal string such as ``"044f"``."""
    if value is None:
        return default
    if isinstance(value, bool):
        raise InvalidConfig(f"{where}.{field}: expected an integer, got {value!r}")
    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        try:
            result = int(value, 16)
        except ValueError:
            raise InvalidConfig(
                f"{where}.{field}: '{value}' is not a hexadecimal id"
            ) from None
    else:
        raise InvalidConfig(f"{where}.{field}: expected an integer, got {value!r}")
    if not 0 <= result <= 0xFFFF:
        raise InvalidConfig(f"{where}.{field}: {result} is out of range")
    return result


def _parse_virt_device(name: str, entry: Any) -> VirtDeviceConfig:
    where = f"virt_devices.{name}"
    if not isinstance(entry, dict):
        raise InvalidConfig(f"{where}: expected an object")
    axes_section = entry.get("axes")
    if not isinstance(axes_section, dict) or not axes_section:
        raise InvalidConfig(f"{where}: 'axes' must be a non-empty object")

    axes: Dict[Axis, AxisConfig] = {}
    for axis_name, axis_entry in axes_section.items():
        axis = Axis.from_name(axis_name)
        if axis is None:
            raise InvalidConfig(f"{where}.axes: unknown axis name '{axis_name}'")
        axes[axis] = _parse_axis(f"{where}.axes.{axis_name}", axis_entry)

    display_name = entry.get("name", DEFAULT_VIRT_NAME)
    if not isinstance(display_name, str) or not display_name:
        raise InvalidConfig(f"{where}.name: expected a non-empty string")

    return VirtDeviceConfig(
        axes=axes,
        name=display_name,
        vendor_id=_parse_id(where, "vendor_id", entry.get("vendor_id"), DEFAULT_VENDOR_ID),
        product_id=_parse_id(where, "product_id", entry.get("product_id"), DEFAULT_PRODUCT_ID),
    )


def _parse_axis(where: str, entry: Any) -> AxisConfig:
    if not isinstance(entry, dict):
        raise InvalidConfig(f"{where}: expected an object with min, max and expr")
    for key in ("min", "max", "expr"):
        if key not in entry:
            raise InvalidConfig(f"{where}: missing '{key}'")
    min_value, max_value, source = entry["min"], entry["max"], entry["expr"]
    for key, value in (("min", min_value), ("max", max_value)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidConfig(f"{where}.{key}: expected an integer, got {value!r}")
    if not isinstance(source, str):
        raise InvalidConfig(f"{where}.expr: expected a string, got {source!r}")

    try:
        expr = parse_expression(source)
    except ExpressionError as e:
        raise type(e)(f"{where}.expr: {e.message}", e.expression, e.position, e.fragment) from None
    try:
        return AxisConfig(min=min_value, max=max_value, expr=expr)
    except InvalidConfig as e:
        raise InvalidConfig(f"{where}: {e}") from None
