"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to the log format or to the console output.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class LogLineInfo:
    """Side information extracted from one log line by the filter chain."""

    date: str = ""
    clock: str = ""
    time: int = 0


@dataclass(frozen=True)
class JoinedArea:
    """The player entered an area."""

    location: str
    kind: str = "joined_area"


@dataclass(frozen=True)
class ConnectingToInstance:
    """The client started connecting to an instance server."""

    address: str
    kind: str = "connecting_to_instance"
