"""Error taxonomy.

Configuration errors are raised while loading the config and building the
dependency graph; they are never recovered and abort startup. Runtime
evaluation errors happen while propagating a live update and are contained to
the single virtual axis being recomputed.
"""
from __future__ import annotations


class PimpMyAxisError(Exception):
    """Base class for every error raised by this package."""


# ----------------------------------------------------------------------------
# Configuration time
# ----------------------------------------------------------------------------


class ConfigurationError(PimpMyAxisError):
    """Startup-fatal error; the operator has to fix the config and restart."""


class InvalidConfig(ConfigurationError):
    """The configuration document does not have the expected shape."""


class DeviceOpenError(ConfigurationError):
    """A configured device could not be located, opened or created."""


class ExpressionError(ConfigurationError):
    """An axis expression could not be turned into a syntax tree.

    Attributes:
        expression: Full source text of the expression
        position: Offset of the offending fragment in ``expression``
        fragment: The offending text itself
    """

    def __init__(self, message: str, expression: str, position: int, fragment: str):
        self.message = message
        self.expression = expression
        self.position = position
        self.fragment = fragment
        super().__init__(self._describe())

    def _describe(self) -> str:
        pointer = " " * self.position + "^"
        return f"{self.message}\n  {self.expression}\n  {pointer}"


class ParseError(ExpressionError):
    """Malformed expression syntax (unexpected token, unbalanced parentheses)."""


class UnknownAxisName(ExpressionError):
    """An axis reference names something other than one of the canonical axes."""


class GraphBuildError(ConfigurationError):
    """A virtual axis expression references an axis that cannot be observed."""

    def __init__(self, message: str, device: str, axis):
        self.device = device
        self.axis = axis
        super().__init__(message)


class UndefinedDevice(GraphBuildError):
    pass


class UnsupportedAxis(GraphBuildError):
    pass


# ----------------------------------------------------------------------------
# Propagation time
# ----------------------------------------------------------------------------


class RuntimeEvaluationError(PimpMyAxisError):
    """A single virtual axis could not be recomputed for one update."""


class MissingBinding(RuntimeEvaluationError):
    def __init__(self, device: str, axis):
        self.device = device
        self.axis = axis
        super().__init__(f"No value is known for axis {device}:{axis}")


class DivisionByZero(RuntimeEvaluationError):
    def __init__(self, expression):
        self.expression = expression
        super().__init__(f"Division by zero in '{expression}'")


class DeviceReadFailure(RuntimeEvaluationError):
    def __init__(self, device: str, axis, reason: str = ""):
        self.device = device
        self.axis = axis
        detail = f": {reason}" if reason else ""
        super().__init__(f"Unable to read axis {device}:{axis}{detail}")


class SinkWriteFailure(RuntimeEvaluationError):
    def __init__(self, device: str, axis, reason: str = ""):
        self.device = device
        self.axis = axis
        detail = f": {reason}" if reason else ""
        super().__init__(f"Unable to write axis {device}:{axis}{detail}")
