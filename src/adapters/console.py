"""Console consumer for dispatched events.

Receives ``(event, info)`` pairs on the main thread and prints one line per
event until the channel closes.
"""

from __future__ import annotations

import logging
import queue
from dataclasses import asdict
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape

from core.channel import EventChannel
from core.errors import ChannelClosed
from core.models import LogLineInfo

LOGGER = logging.getLogger(__name__)


def format_event(event: Any, info: LogLineInfo) -> str:
    """Return a plain single-line description of one event."""

    fields = {key: value for key, value in asdict(event).items() if key != "kind"}
    details = ", ".join(f"{key}={value}" for key, value in fields.items())
    kind = getattr(event, "kind", type(event).__name__)
    if info.date:
        stamp = f"{info.date} {info.clock} #{info.time}"
    else:
        stamp = "-"
    return f"[{stamp}] {kind}: {details}"


class ConsoleConsumer:
    """Prints events from a channel with a rich console."""

    def __init__(self, console: Optional[Console] = None, poll_interval: float = 0.5) -> None:
        self._console = console or Console()
        self._poll_interval = poll_interval

    def consume(self, channel: EventChannel) -> int:
        """Print events until the channel is closed and drained."""

        printed = 0
        while True:
            # Timed waits keep the main thread responsive to Ctrl+C on Windows.
            try:
                event, info = channel.receive(timeout=self._poll_interval)
            except queue.Empty:
                continue
            except ChannelClosed:
                break
            self._console.print(escape(format_event(event, info)), highlight=False)
            printed += 1
        LOGGER.info("Event channel closed after %s events", printed)
        return printed
