"""Settings shapes handed to the core by the app layer.

``PollConfig`` drives the byte -> line polling stack and ``ChannelConfig``
bounds the event channel between the dispatch thread and the console.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PollConfig:
    """Polling settings for the byte -> line stack."""

    wait_delay_ms: int
    buffer_len: int
    carry_partial: bool
    from_start: bool


@dataclass(frozen=True)
class ChannelConfig:
    """Event channel bound and overflow policy (0 means unbounded)."""

    max_size: int
    overflow: str
