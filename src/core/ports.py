"""Ports (interfaces) used by the dispatch core.

Ports define the minimal contracts between the polling stages, the engine
and whatever receives its events, so each side can be swapped or faked.
"""

from __future__ import annotations

from typing import Any, Protocol, TypeVar

T_co = TypeVar("T_co", covariant=True)


class Poller(Protocol[T_co]):
    """Blocks until new output exists and returns it as one batch."""

    def wait_and_read(self) -> T_co:
        ...


class EventSink(Protocol):
    """Receives ``(event, info)`` pairs produced by event handlers."""

    def send(self, event: Any, info: Any) -> None:
        ...
