from __future__ import annotations

import queue
import threading

import pytest

from core.channel import EventChannel
from core.errors import ChannelClosed, SinkError


def test_unbounded_channel_keeps_order() -> None:
    channel = EventChannel()
    for index in range(100):
        channel.send(f"event-{index}", index)

    assert len(channel) == 100
    assert channel.receive() == ("event-0", 0)
    assert channel.receive() == ("event-1", 1)


def test_iteration_drains_then_stops_on_close() -> None:
    channel = EventChannel()
    channel.send("a", 1)
    channel.send("b", 2)
    channel.close()

    assert list(channel) == [("a", 1), ("b", 2)]
    with pytest.raises(ChannelClosed):
        channel.receive()


def test_send_after_close_raises_sink_error() -> None:
    channel = EventChannel()
    channel.close()
    channel.close()

    assert channel.closed
    with pytest.raises(SinkError):
        channel.send("late", None)


def test_receive_times_out_when_empty() -> None:
    channel = EventChannel()

    with pytest.raises(queue.Empty):
        channel.receive(timeout=0.01)


def test_drop_oldest_evicts_queued_event() -> None:
    channel = EventChannel(max_size=2, overflow="drop_oldest")
    channel.send("a", None)
    channel.send("b", None)
    channel.send("c", None)
    channel.close()

    assert [event for event, _ in channel] == ["b", "c"]
    assert channel.dropped == 1


def test_drop_newest_discards_incoming_event() -> None:
    channel = EventChannel(max_size=2, overflow="drop_newest")
    channel.send("a", None)
    channel.send("b", None)
    channel.send("c", None)
    channel.close()

    assert [event for event, _ in channel] == ["a", "b"]
    assert channel.dropped == 1


def test_block_policy_waits_for_room() -> None:
    channel = EventChannel(max_size=1, overflow="block")
    channel.send("a", None)
    sent = threading.Event()

    def producer() -> None:
        channel.send("b", None)
        sent.set()

    thread = threading.Thread(target=producer)
    thread.start()

    assert not sent.wait(0.05)
    assert channel.receive() == ("a", None)
    thread.join(timeout=1)
    assert sent.is_set()
    assert channel.receive() == ("b", None)
    assert channel.dropped == 0


def test_close_wakes_blocked_sender() -> None:
    channel = EventChannel(max_size=1)
    channel.send("a", None)
    errors: list = []

    def producer() -> None:
        try:
            channel.send("b", None)
        except SinkError as exc:
            errors.append(exc)

    thread = threading.Thread(target=producer)
    thread.start()
    channel.close()
    thread.join(timeout=1)

    assert not thread.is_alive()
    assert len(errors) == 1


def test_consumer_thread_sees_every_event_then_closure() -> None:
    channel = EventChannel()
    received: list = []

    consumer = threading.Thread(target=lambda: received.extend(channel))
    consumer.start()
    for index in range(10):
        channel.send(index, None)
    channel.close()
    consumer.join(timeout=1)

    assert [event for event, _ in received] == list(range(10))


def test_rejects_unknown_overflow_policy() -> None:
    with pytest.raises(ValueError):
        EventChannel(max_size=1, overflow="drop_everything")
