"""Error taxonomy for the tailing and dispatch core.

Everything below the dispatch engine is fail-fast: read and decode failures
are raised once and travel up unchanged so the producer thread can report
them. Pattern errors are raised at registration time, before any line is
processed.
"""

from __future__ import annotations


class ExileWatchError(Exception):
    """Base class for all errors raised by exilewatch."""


class StreamReadError(ExileWatchError):
    """The underlying stream failed while polling for new bytes."""


class StreamDecodeError(ExileWatchError, UnicodeError):
    """A polled byte batch was not valid UTF-8."""


class PatternError(ExileWatchError):
    """An event rule pattern is not a valid regular expression."""

    def __init__(self, pattern: str, message: str) -> None:
        super().__init__(f"Invalid event pattern {pattern!r}: {message}")
        self.pattern = pattern


class SinkError(ExileWatchError):
    """An event could not be delivered to its downstream sink."""


class HandlerError(ExileWatchError):
    """An event handler failed; raised by the dispatch loop."""

    def __init__(self, rule_name: str, line: str) -> None:
        super().__init__(f"Handler for rule {rule_name!r} failed on line {line!r}")
        self.rule_name = rule_name
        self.line = line


class ChannelClosed(ExileWatchError):
    """The event channel is closed and holds no more events."""


class PollCancelled(ExileWatchError):
    """Polling was stopped through the stop event."""
