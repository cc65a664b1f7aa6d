"""Command line entry point.

Loads the configuration, opens the physical devices, validates the
dependency graph, creates the virtual devices and then propagates updates
until every physical device has gone away.
"""

from __future__ import annotations

import argparse
from typing import Dict, List, Mapping, Optional

from . import __version__
from .config.loader import find_config_file, load_config
from .domain.config import Config, DeviceMatcher, VirtDeviceConfig
from .domain.engine import PropagationEngine
from .domain.graph import build_graph
from .errors import ConfigurationError, RuntimeEvaluationError
from .logging_config import LEVEL_MAP, get_logger, init_logging

log = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pimp-my-axis",
        description="Combine physical joystick axes into virtual axes.",
    )
    parser.add_argument("-c", "--config", help="path of the JSON config file")
    parser.add_argument(
        "--log-level",
        choices=sorted(LEVEL_MAP, key=LEVEL_MAP.get),
        type=str.upper,
        help="logging level (default: $PMA_LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        help="stop on the first evaluation error instead of skipping the axis",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def open_real_devices(matchers: Mapping[str, DeviceMatcher]) -> Dict[str, "RealDevice"]:
    from .input.discovery import find_event_devices, resolve_matcher
    from .input.real_device import RealDevice

    available = None
    devices: Dict[str, RealDevice] = {}
    try:
        for name, matcher in matchers.items():
            if matcher.path is None and available is None:
                available = find_event_devices()
            path = resolve_matcher(matcher, available or {})
            devices[name] = RealDevice(name, path)
    except ConfigurationError:
        close_all(devices)
        raise
    return devices


def create_virt_devices(configs: Mapping[str, VirtDeviceConfig]) -> Dict[str, "VirtDevice"]:
    from .output.virt_device import VirtDevice

    devices: Dict[str, VirtDevice] = {}
    try:
        for name, config in configs.items():
            devices[name] = VirtDevice(name, config)
    except ConfigurationError:
        close_all(devices)
        raise
    return devices


def close_all(devices: Mapping[str, object]) -> None:
    for dev in devices.values():
        dev.close()


def run(config: Config, fail_fast: bool = False) -> int:
    from .input.listener import DeviceListener, UpdateChannel

    real_devices = open_real_devices(config.real_devices)
    virt_devices: Dict[str, object] = {}
    try:
        # Validate before any virtual device shows up on the system.
        graph = build_graph(real_devices, config.virt_devices)
        virt_devices = create_virt_devices(config.virt_devices)
        engine = PropagationEngine(graph, virt_devices, fail_fast=fail_fast)

        channel = UpdateChannel()
        listeners = [DeviceListener(dev, channel) for dev in real_devices.values()]
        for listener in listeners:
            listener.start()
        log.info(
            "Propagating %d physical axes to %d virtual axes",
            len(graph),
            len(graph.virt_axes),
        )
        stats = engine.run(channel)
        log.info(
            "All physical devices are gone (%d updates, %d writes, %d failures)",
            stats.received,
            stats.written,
            stats.failed,
        )
    finally:
        close_all(virt_devices)
        close_all(real_devices)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    init_logging(args.log_level, force=args.log_level is not None)
    try:
        config = load_config(find_config_file(args.config))
        log.debug("Config: %s", config)
        return run(config, fail_fast=args.fail_fast)
    except ConfigurationError as e:
        log.error("%s", e)
        return 1
    except RuntimeEvaluationError as e:
        log.error("Stopping: %s", e)
        return 2
    except KeyboardInterrupt:
        log.info("Interrupted")
        return 130
