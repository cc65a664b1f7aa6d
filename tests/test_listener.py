"""Tests for the update channel and per-device listener threads."""

import threading

from pimp_my_axis.domain.axis import Axis, AxisUpdate
from pimp_my_axis.domain.config import AxisConfig, VirtDeviceConfig
from pimp_my_axis.domain.engine import PropagationEngine
from pimp_my_axis.domain.graph import build_graph
from pimp_my_axis.domain.parser import parse_expression
from pimp_my_axis.input.listener import DeviceListener, UpdateChannel

from fakes import FakeSink, FakeSource


def updates(device, axis, values):
    return [AxisUpdate(device, axis, v) for v in values]


def test_channel_without_producers_is_closed():
    channel = UpdateChannel()
    assert channel.receive() is None
    assert list(channel) == []


def test_channel_preserves_order_and_does_not_coalesce():
    channel = UpdateChannel()
    channel.open_producer()
    for update in updates("stick", Axis.X, [1, 2, 2, 3]):
        channel.send(update)
    channel.close_producer()
    assert [u.new_value for u in channel] == [1, 2, 2, 3]


def test_channel_ends_after_last_producer_closes():
    channel = UpdateChannel()
    channel.open_producer()
    channel.open_producer()
    channel.send(AxisUpdate("a", Axis.X, 1))
    channel.close_producer()
    channel.send(AxisUpdate("b", Axis.Y, 2))
    channel.close_producer()
    assert [u.device for u in channel] == ["a", "b"]


def test_channel_is_unbounded():
    channel = UpdateChannel()
    channel.open_producer()
    for update in updates("stick", Axis.X, range(50000)):
        channel.send(update)
    assert channel.pending() == 50000
    channel.close_producer()
    assert sum(1 for _ in channel) == 50000


def test_listener_forwards_every_event_then_closes():
    stick = FakeSource("stick", {Axis.X: 0}, events=updates("stick", Axis.X, [5, 6, 7]))
    channel = UpdateChannel()
    listener = DeviceListener(stick, channel)
    assert listener.start() is True
    listener.join(timeout=2.0)
    assert [u.new_value for u in channel] == [5, 6, 7]


def test_listener_failure_still_closes_stream():
    class BrokenSource(FakeSource):
        def next_event(self):
            raise OSError("device went away")

    channel = UpdateChannel()
    listener = DeviceListener(BrokenSource("broken"), channel)
    listener.start()
    listener.join(timeout=2.0)
    assert list(channel) == []


def test_engine_consumes_until_all_devices_are_gone():
    release = threading.Event()

    class GatedSource(FakeSource):
        def next_event(self):
            release.wait(timeout=2.0)
            return super().next_event()

    stick = GatedSource("stick", {Axis.X: 0}, events=updates("stick", Axis.X, [1, 2]))
    pedals = FakeSource("pedals", {Axis.RX: 0}, events=updates("pedals", Axis.RX, [10]))
    graph = build_graph(
        {"stick": stick, "pedals": pedals},
        {
            "out": VirtDeviceConfig(
                axes={
                    Axis.X: AxisConfig(-100, 100, parse_expression("stick:X + pedals:RX"))
                }
            )
        },
    )
    sink = FakeSink("out")
    engine = PropagationEngine(graph, {"out": sink})

    channel = UpdateChannel()
    listeners = [DeviceListener(stick, channel), DeviceListener(pedals, channel)]
    for listener in listeners:
        listener.start()
    # Let the pedal update through first, then the stick ones.
    listeners[1].join(timeout=2.0)
    release.set()

    stats = engine.run(channel)
    assert stats.received == 3
    assert sink.writes == [(Axis.X, 10), (Axis.X, 1), (Axis.X, 2)]
