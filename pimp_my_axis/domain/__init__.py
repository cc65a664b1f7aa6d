"""
Expression language and propagation core.

Modules:
- axis: Axis, AxisKey, AxisUpdate
- expression: syntax tree, evaluate() and dependencies()
- parser: parse_expression()
- config: typed configuration of devices and axes
- devices: AxisSource / AxisSink capability contracts
- graph: RealAxis, VirtAxis, DependencyGraph, build_graph()
- engine: PropagationEngine

All public names are re-exported here for convenient imports.
"""

from .axis import Axis, AxisKey, AxisUpdate
from .expression import (
    AxisReference,
    BinaryOp,
    Expression,
    Literal,
    Operator,
    dependencies,
    evaluate,
)
from .parser import parse_expression
from .config import AxisConfig, Config, DeviceMatcher, VirtDeviceConfig
from .devices import AxisSink, AxisSource
from .graph import DependencyGraph, RealAxis, VirtAxis, build_graph
from .engine import PropagationEngine, PropagationStats

__all__ = [
    "Axis",
    "AxisKey",
    "AxisUpdate",
    "AxisReference",
    "BinaryOp",
    "Expression",
    "Literal",
    "Operator",
    "dependencies",
    "evaluate",
    "parse_expression",
    "AxisConfig",
    "Config",
    "DeviceMatcher",
    "VirtDeviceConfig",
    "AxisSink",
    "AxisSource",
    "DependencyGraph",
    "RealAxis",
    "VirtAxis",
    "build_graph",
    "PropagationEngine",
    "PropagationStats",
]
