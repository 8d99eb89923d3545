"""In-process event channel between the dispatch thread and its consumer.

Pairs of ``(event, info)`` flow one way. The channel is unbounded unless a
``max_size`` is given; bounded channels either block the sender or drop an
event according to the overflow policy. Closing the channel is the terminal
signal for the consumer: iteration ends once it is closed and drained.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections import deque
from typing import Any, Deque, Iterator, Optional, Tuple

from core.errors import ChannelClosed, SinkError

LOGGER = logging.getLogger(__name__)

OVERFLOW_POLICIES = ("block", "drop_oldest", "drop_newest")


class EventChannel:
    """Thread-safe queue of ``(event, info)`` pairs."""

    def __init__(self, max_size: int = 0, overflow: str = "block") -> None:
        if max_size < 0:
            raise ValueError("max_size must not be negative")
        if overflow not in OVERFLOW_POLICIES:
            raise ValueError(f"Unsupported overflow policy: {overflow}")
        self._max_size = max_size
        self._overflow = overflow
        self._items: Deque[Tuple[Any, Any]] = deque()
        self._condition = threading.Condition()
        self._closed = False
        self._dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def dropped(self) -> int:
        return self._dropped

    def __len__(self) -> int:
        with self._condition:
            return len(self._items)

    def _full(self) -> bool:
        return bool(self._max_size) and len(self._items) >= self._max_size

    def send(self, event: Any, info: Any) -> None:
        """Queue one pair, applying the overflow policy when full."""

        with self._condition:
            if self._closed:
                raise SinkError("Event channel is closed")

            if self._full():
                if self._overflow == "drop_newest":
                    self._dropped += 1
                    LOGGER.warning("Event channel full, dropped newest event (%s dropped)", self._dropped)
                    return
                if self._overflow == "drop_oldest":
                    self._items.popleft()
                    self._dropped += 1
                    LOGGER.warning("Event channel full, dropped oldest event (%s dropped)", self._dropped)
                else:
                    while self._full() and not self._closed:
                        self._condition.wait()
                    if self._closed:
                        raise SinkError("Event channel closed while waiting for room")

            self._items.append((event, info))
            self._condition.notify_all()

    def receive(self, timeout: Optional[float] = None) -> Tuple[Any, Any]:
        """Block until a pair is available.

        Raises ``ChannelClosed`` once the channel is closed and empty, and
        ``queue.Empty`` when ``timeout`` expires first.
        """

        with self._condition:
            ready = self._condition.wait_for(lambda: self._items or self._closed, timeout)
            if not ready:
                raise queue.Empty
            if not self._items:
                raise ChannelClosed("Event channel is closed")
            item = self._items.popleft()
            self._condition.notify_all()
            return item

    def close(self) -> None:
        """Stop accepting events and wake every waiting sender and receiver."""

        with self._condition:
            if self._closed:
                return
            self._closed = True
            self._condition.notify_all()
        LOGGER.debug("Event channel closed")

    def __iter__(self) -> Iterator[Tuple[Any, Any]]:
        while True:
            try:
                yield self.receive()
            except ChannelClosed:
                return
