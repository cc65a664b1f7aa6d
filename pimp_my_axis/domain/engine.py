"""Propagation of physical axis updates to virtual axes.

For every update the engine looks up the physical axis in the dependency
graph and recomputes each downstream virtual axis in graph order. Each
downstream axis is handled to completion before the next one starts:

1. bind the triggering axis to the new value
2. read every other dependency from its device at that moment
3. evaluate the expression
4. write the result to the virtual device

Updates for axes nothing depends on are dropped. A failure while
recomputing one virtual axis is logged and that axis is skipped; the other
downstream axes and later updates are still processed.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping

from .axis import AxisKey, AxisUpdate
from .devices import AxisSink
from .expression import evaluate
from .graph import DependencyGraph, VirtAxis
from ..errors import ConfigurationError, RuntimeEvaluationError
from ..logging_config import get_logger

log = get_logger(__name__)


@dataclass
class PropagationStats:
    received: int = 0
    ignored: int = 0
    written: int = 0
    failed: int = 0


class PropagationEngine:
    """Single consumer of the update stream.

    Args:
        graph: Dependency graph to propagate through
        sinks: Virtual devices by configured name; one is required for every
            virtual device in the graph
        fail_fast: Re-raise runtime evaluation errors instead of skipping the
            affected virtual axis
    """

    def __init__(
        self,
        graph: DependencyGraph,
        sinks: Mapping[str, AxisSink],
        fail_fast: bool = False,
    ):
        self._fail_fast = fail_fast
        self._swap_lock = threading.Lock()
        self._state = (graph, self._arena(graph, sinks))
        self.stats = PropagationStats()

    @staticmethod
    def _arena(graph: DependencyGraph, sinks: Mapping[str, AxisSink]) -> List[AxisSink]:
        missing = [name for name in graph.virt_device_names if name not in sinks]
        if missing:
            raise ConfigurationError(
                f"No output device for virtual device(s): {', '.join(missing)}"
            )
        return [sinks[name] for name in graph.virt_device_names]

    @property
    def graph(self) -> DependencyGraph:
        return self._state[0]

    def swap_graph(self, graph: DependencyGraph, sinks: Mapping[str, AxisSink]) -> None:
        """Replace the graph used for subsequent updates.

        The swap takes effect between two updates; an update being propagated
        finishes against the graph it started with.
        """
        state = (graph, self._arena(graph, sinks))
        with self._swap_lock:
            self._state = state
        log.info("Dependency graph replaced (%d physical axes)", len(graph))

    def run(self, updates: Iterable[AxisUpdate]) -> PropagationStats:
        """Propagate every update, in order, until the stream ends."""
        for update in updates:
            self.handle(update)
        log.debug(
            "Update stream finished: %d received, %d ignored, %d written, %d failed",
            self.stats.received,
            self.stats.ignored,
            self.stats.written,
            self.stats.failed,
        )
        return self.stats

    def handle(self, update: AxisUpdate) -> int:
        """Propagate one update and return the number of virtual axes written."""
        with self._swap_lock:
            graph, arena = self._state
        self.stats.received += 1

        real_axis = graph.get(update.key)
        if real_axis is None:
            self.stats.ignored += 1
            log.debug("Ignoring update for axis %s which is not used", update.key)
            return 0

        written = 0
        for downstream in real_axis.downstream:
            try:
                self._recompute(graph, arena, downstream, update)
            except RuntimeEvaluationError as e:
                self.stats.failed += 1
                if self._fail_fast:
                    raise
                log.warning(
                    "Skipping virtual axis %s for update %s=%d: %s",
                    downstream,
                    update.key,
                    update.new_value,
                    e,
                )
            else:
                written += 1
        self.stats.written += written
        return written

    def _recompute(
        self,
        graph: DependencyGraph,
        arena: List[AxisSink],
        downstream: VirtAxis,
        update: AxisUpdate,
    ) -> None:
        bindings: Dict[AxisKey, int] = {update.key: update.new_value}
        for dep in downstream.dependencies:
            if dep not in bindings:
                bindings[dep] = graph.read(dep)

        new_value = evaluate(downstream.expr, bindings)
        log.debug("Calculated new value %d for virtual axis %s", new_value, downstream)
        arena[downstream.device_id].write(downstream.axis, new_value)
