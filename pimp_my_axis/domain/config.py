"""
Typed configuration consumed by the graph builder and the device layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from .axis import Axis
from .expression import Expression
from ..config.settings import DEFAULT_PRODUCT_ID, DEFAULT_VENDOR_ID, DEFAULT_VIRT_NAME
from ..errors import InvalidConfig


@dataclass(frozen=True)
class AxisConfig:
    """
    Range and governing expression of one virtual axis.

    The range is not enforced on computed values; it is handed to the
    virtual device when the axis is created.
    """

    min: int
    max: int
    expr: Expression

    def __post_init__(self):
        if self.min > self.max:
            raise InvalidConfig(
                f"Axis range min ({self.min}) must not exceed max ({self.max})"
            )


@dataclass(frozen=True)
class DeviceMatcher:
    """
    Locates a physical device, either by event device path or by USB ids.
    """

    path: Optional[str] = None
    vendor_id: Optional[int] = None
    product_id: Optional[int] = None

    def __post_init__(self):
        by_ids = self.vendor_id is not None or self.product_id is not None
        if self.path is None and not by_ids:
            raise InvalidConfig("Device matcher needs a path or vendor_id/product_id")
        if self.path is not None and by_ids:
            raise InvalidConfig(
                "Device matcher takes either a path or vendor_id/product_id, not both"
            )
        if by_ids and (self.vendor_id is None or self.product_id is None):
            raise InvalidConfig("Device matcher needs both vendor_id and product_id")

    def __str__(self) -> str:
        if self.path is not None:
            return self.path
        return f"{self.vendor_id:04x}:{self.product_id:04x}"


@dataclass
class VirtDeviceConfig:
    axes: Dict[Axis, AxisConfig]
    name: str = DEFAULT_VIRT_NAME
    vendor_id: int = DEFAULT_VENDOR_ID
    product_id: int = DEFAULT_PRODUCT_ID


@dataclass
class Config:
    real_devices: Dict[str, DeviceMatcher] = field(default_factory=dict)
    virt_devices: Dict[str, VirtDeviceConfig] = field(default_factory=dict)
