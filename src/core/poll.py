"""Pollers that turn an appended byte stream into complete lines.

Each stage owns exactly one instance of the stage below it and exposes the
same ``wait_and_read`` contract at a different output type:

    BytePoll (bytes) -> CharPoll (str) -> LinePoll (list[str])

Only appending is supported; the stream is never seeked or truncated here.
"""

from __future__ import annotations

import codecs
import logging
import threading
from typing import BinaryIO, List, Optional

from core.errors import PollCancelled, StreamDecodeError, StreamReadError
from core.ports import Poller

LOGGER = logging.getLogger(__name__)


class BytePoll:
    """Polls a readable stream for newly appended bytes."""

    def __init__(
        self,
        read_from: BinaryIO,
        wait_delay_ms: int = 20,
        buffer_len: int = 1024,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        if buffer_len <= 0:
            raise ValueError("buffer_len must be positive")
        if wait_delay_ms < 0:
            raise ValueError("wait_delay_ms must not be negative")
        self._read_from = read_from
        self._wait_delay = wait_delay_ms / 1000.0
        self._buffer_len = buffer_len
        self._stop_event = stop_event if stop_event is not None else threading.Event()

    def wait_and_read(self) -> bytes:
        """Block until new bytes are appended, then return them."""

        while True:
            if self._stop_event.is_set():
                raise PollCancelled("Byte poll stopped")
            try:
                chunk = self._read_from.read(self._buffer_len)
            except OSError as exc:
                raise StreamReadError(f"Failed to read from stream: {exc}") from exc

            # Non-blocking raw streams return None when nothing is available.
            if chunk:
                return bytes(chunk)

            if self._stop_event.wait(self._wait_delay):
                raise PollCancelled("Byte poll stopped")


class CharPoll:
    """Decodes each byte batch as UTF-8 text.

    By default every batch must be valid UTF-8 on its own, so a codepoint split
    across two polls fails with ``StreamDecodeError``. With ``carry_partial``
    the trailing bytes of an incomplete codepoint are kept for the next poll.
    """

    def __init__(self, byte_poll: Poller[bytes], carry_partial: bool = False) -> None:
        self._byte_poll = byte_poll
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="strict") if carry_partial else None

    def wait_and_read(self) -> str:
        while True:
            new_bytes = self._byte_poll.wait_and_read()
            try:
                if self._decoder is None:
                    return new_bytes.decode("utf-8")
                text = self._decoder.decode(new_bytes)
            except UnicodeDecodeError as exc:
                raise StreamDecodeError(f"Polled bytes are not valid UTF-8: {exc}") from exc
            if text:
                return text
            LOGGER.debug("Carrying %s undecoded bytes into the next poll", len(new_bytes))


class LinePoll:
    """Buffers characters across polls and emits only complete lines."""

    def __init__(self, char_poll: Poller[str]) -> None:
        self._char_poll = char_poll
        self._buffer: List[str] = []

    @classmethod
    def from_stream(
        cls,
        read_from: BinaryIO,
        wait_delay_ms: int = 20,
        buffer_len: int = 1024,
        stop_event: Optional[threading.Event] = None,
        carry_partial: bool = False,
    ) -> "LinePoll":
        """Build the full byte -> char -> line stack over ``read_from``."""

        byte_poll = BytePoll(read_from, wait_delay_ms, buffer_len, stop_event)
        return cls(CharPoll(byte_poll, carry_partial=carry_partial))

    @property
    def pending(self) -> str:
        """Unterminated text waiting for its newline."""

        return "".join(self._buffer)

    def wait_and_read(self) -> List[str]:
        """Block until at least one new line is complete and return all of them."""

        lines: List[str] = []
        while not lines:
            text = self._char_poll.wait_and_read()
            *complete, tail = text.split("\n")
            for part in complete:
                self._buffer.append(part)
                lines.append("".join(self._buffer))
                self._buffer.clear()
            if tail:
                self._buffer.append(tail)
        return lines
