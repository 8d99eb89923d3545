from __future__ import annotations

import importlib
import logging

import pytest

from app import _Producer
from core.channel import EventChannel
from core.errors import StreamReadError


class FailingEvents:
    def __init__(self, exc: Exception) -> None:
        self._exc = exc

    def run(self) -> None:
        raise self._exc


class FinishingEvents:
    def __init__(self, channel: EventChannel) -> None:
        self._channel = channel

    def run(self) -> None:
        self._channel.send("event", None)


@pytest.mark.parametrize("exc", [ValueError("filter blew up"), StreamReadError("disk gone")])
def test_producer_records_failure_and_closes_channel(exc: Exception, caplog) -> None:
    channel = EventChannel()
    producer = _Producer(FailingEvents(exc), channel)

    with caplog.at_level(logging.ERROR, logger="app"):
        producer.thread.start()
        producer.thread.join(timeout=1)

    assert not producer.thread.is_alive()
    assert producer.error is exc
    assert channel.closed
    assert list(channel) == []
    assert "Dispatch loop failed" in caplog.text


def test_producer_closes_channel_after_clean_exit() -> None:
    channel = EventChannel()
    producer = _Producer(FinishingEvents(channel), channel)

    producer.thread.start()
    producer.thread.join(timeout=1)

    assert producer.error is None
    assert channel.closed
    assert list(channel) == [("event", None)]


def test_missing_config_names_the_override_variable(tmp_path, monkeypatch) -> None:
    import settings

    monkeypatch.setenv("EXILEWATCH_CONFIG", str(tmp_path / "missing.json"))
    try:
        with pytest.raises(FileNotFoundError, match="EXILEWATCH_CONFIG"):
            importlib.reload(settings)
    finally:
        monkeypatch.delenv("EXILEWATCH_CONFIG")
        importlib.reload(settings)
