"""Dependency graph from physical axes to the virtual axes they drive.

The graph is a two-level fan-out: every physical axis referenced by some
virtual axis expression maps to the ordered list of virtual axes that must be
recomputed when it changes. Virtual axes only ever read physical devices; a
reference to another virtual device is rejected like any undefined device.

Virtual devices live in an arena. A ``VirtAxis`` stores the index of its
device in ``DependencyGraph.virt_device_names`` and whoever owns the actual
output devices resolves that index, so the graph itself holds no handle to
anything it writes to.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from .axis import Axis, AxisKey
from .config import AxisConfig, VirtDeviceConfig
from .devices import AxisSource
from .expression import Expression, dependencies
from ..errors import DeviceReadFailure, UndefinedDevice, UnsupportedAxis
from ..logging_config import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class VirtAxis:
    """
    One axis of a virtual device together with its governing expression.

    Attributes:
        device_id: Index of the owning virtual device in the graph's arena
        device_name: Configured name of the owning virtual device
        axis: The axis this entry computes
        config: Range and expression of the axis
    """

    device_id: int
    device_name: str
    axis: Axis
    config: AxisConfig
    dependencies: Tuple[AxisKey, ...] = field(init=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "dependencies", tuple(dependencies(self.config.expr)))

    @property
    def expr(self) -> Expression:
        return self.config.expr

    @property
    def identity(self) -> Tuple[int, Axis, Expression]:
        return (self.device_id, self.axis, self.config.expr)

    def __str__(self) -> str:
        return f"{self.device_name}:{self.axis}"


@dataclass
class RealAxis:
    """A physical axis and the virtual axes downstream of it."""

    device: AxisSource
    axis: Axis
    downstream: List[VirtAxis] = field(default_factory=list)

    @property
    def key(self) -> AxisKey:
        return AxisKey(self.device.name, self.axis)

    def add_downstream(self, virt_axis: VirtAxis) -> bool:
        """Append ``virt_axis`` unless an identical entry is already present."""
        if any(v.identity == virt_axis.identity for v in self.downstream):
            return False
        self.downstream.append(virt_axis)
        return True


class DependencyGraph:
    """Read-only lookup structure used by the propagation engine."""

    def __init__(
        self,
        sources: Mapping[str, AxisSource],
        virt_device_names: List[str],
        virt_axes: List[VirtAxis],
        real_axes: Dict[AxisKey, RealAxis],
    ):
        self.sources = dict(sources)
        self.virt_device_names = list(virt_device_names)
        self.virt_axes = list(virt_axes)
        self._real_axes = dict(real_axes)

    def get(self, key: AxisKey) -> Optional[RealAxis]:
        return self._real_axes.get(key)

    def read(self, key: AxisKey) -> int:
        """Read the current value of a physical axis from its device."""
        source = self.sources.get(key.device)
        if source is None:
            raise DeviceReadFailure(key.device, key.axis, "device is not defined")
        return source.read(key.axis)

    def real_axes(self) -> Iterator[RealAxis]:
        return iter(self._real_axes.values())

    def __contains__(self, key: AxisKey) -> bool:
        return key in self._real_axes

    def __len__(self) -> int:
        return len(self._real_axes)


def build_graph(
    sources: Mapping[str, AxisSource],
    virt_devices: Mapping[str, VirtDeviceConfig],
) -> DependencyGraph:
    """Validate every virtual axis expression and build the dependency graph.

    Args:
        sources: Physical devices by configured name
        virt_devices: Virtual device configurations by configured name

    Returns:
        The complete graph. Nothing is returned for a partially valid
        configuration.

    Raises:
        UndefinedDevice: an expression references a device that is not a
            configured physical device
        UnsupportedAxis: an expression references an axis the physical
            device does not report
    """
    virt_device_names: List[str] = []
    virt_axes: List[VirtAxis] = []
    real_axes: Dict[AxisKey, RealAxis] = {}

    for device_id, (device_name, device_config) in enumerate(virt_devices.items()):
        virt_device_names.append(device_name)
        for axis, axis_config in device_config.axes.items():
            virt_axes.append(VirtAxis(device_id, device_name, axis, axis_config))

    for virt_axis in virt_axes:
        for dep in virt_axis.dependencies:
            source = sources.get(dep.device)
            if source is None:
                if dep.device in virt_devices:
                    message = (
                        f"Virtual axis {virt_axis} references virtual device "
                        f"'{dep.device}'; expressions may only read physical devices"
                    )
                else:
                    message = (
                        f"Expression of virtual axis {virt_axis} references device "
                        f"'{dep.device}' which is not defined"
                    )
                raise UndefinedDevice(message, dep.device, dep.axis)
            if not source.supports(dep.axis):
                raise UnsupportedAxis(
                    f"Device '{dep.device}' does not support axis '{dep.axis}' "
                    f"(referenced by virtual axis {virt_axis})",
                    dep.device,
                    dep.axis,
                )

            real_axis = real_axes.get(dep)
            if real_axis is None:
                real_axis = real_axes[dep] = RealAxis(source, dep.axis)
            if real_axis.add_downstream(virt_axis):
                log.debug("%s -> %s", dep, virt_axis)

    return DependencyGraph(sources, virt_device_names, virt_axes, real_axes)
