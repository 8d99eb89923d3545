"""Path of Exile wiring for the dispatch engine.

Registers the metadata filter for the client log prefix and the event rules
that turn matched lines into domain events sent to an event sink.
"""

from __future__ import annotations

import logging
import re
from typing import List

from core.engine import DispatchEngine
from core.models import ConnectingToInstance, JoinedArea, LogLineInfo
from core.ports import EventSink, Poller

LOGGER = logging.getLogger(__name__)

# Format: "2024/01/01 00:00:01 123 abc [INFO Client 42] : message"
LINE_PREFIX = re.compile(
    r"^(?P<date>\d{4}/\d{2}/\d{2}) (?P<clock>\d{2}:\d{2}:\d{2}) (?P<time>\d+) [^\]]*\]"
)

JOINED_AREA_PATTERN = r"^: You have entered (?P<location>.*)\.$"
CONNECTING_PATTERN = r"^Connecting to instance server at (?P<address>[^\s:]+)"


def extract_line_info(line: str, info: LogLineInfo) -> str:
    """Record the prefix fields in ``info`` and return the line without them.

    Lines without the prefix are returned unchanged.
    """

    match = LINE_PREFIX.match(line)
    if not match:
        return line

    info.date = match.group("date")
    info.clock = match.group("clock")
    info.time = int(match.group("time"))
    return line[match.end():].strip()


class PoeEvents:
    """Wraps a ``DispatchEngine`` that sends Path of Exile events to a sink."""

    def __init__(self, line_poll: Poller[List[str]], sink: EventSink) -> None:
        self._engine: DispatchEngine[LogLineInfo] = DispatchEngine(line_poll, LogLineInfo)
        self._sink = sink

    @property
    def engine(self) -> DispatchEngine[LogLineInfo]:
        return self._engine

    def register_poe_events(self) -> None:
        """Register the prefix filter and every game event rule."""

        sink = self._sink
        engine = self._engine
        engine.register_filter(extract_line_info)

        def on_joined_area(match: "re.Match[str]", info: LogLineInfo) -> None:
            sink.send(JoinedArea(location=match.group("location")), info)

        def on_connecting(match: "re.Match[str]", info: LogLineInfo) -> None:
            sink.send(ConnectingToInstance(address=match.group("address")), info)

        engine.register_event(JOINED_AREA_PATTERN, on_joined_area, name="joined_area")
        engine.register_event(CONNECTING_PATTERN, on_connecting, name="connecting_to_instance")
        LOGGER.info("%s event rules are registered", len(engine.rules))

    def run(self) -> None:
        """Run until cancelled, sending events to the sink."""

        self._engine.run()
