"""Line dispatch engine (core domain).

The engine pulls batches of complete lines from a line poller, runs every
line through the registered filter chain and then offers the rewritten line
to every event rule. Matching is not exclusive: each rule whose pattern
matches fires, in registration order.
"""

from __future__ import annotations

import copy
import logging
import re
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, TypeVar

from core.errors import HandlerError, PatternError, PollCancelled
from core.ports import Poller

LOGGER = logging.getLogger(__name__)

InfoT = TypeVar("InfoT")

FilterFn = Callable[[str, InfoT], str]
HandlerFn = Callable[["re.Match[str]", InfoT], None]


@dataclass(frozen=True)
class EventRule(Generic[InfoT]):
    """Compiled pattern paired with the handler fired on every match."""

    name: str
    pattern: "re.Pattern[str]"
    handler: HandlerFn


class DispatchEngine(Generic[InfoT]):
    """Applies filters and event rules to every polled line."""

    def __init__(self, line_poll: Poller[List[str]], info_factory: Callable[[], InfoT]) -> None:
        self._line_poll = line_poll
        self._info_factory = info_factory
        self._filters: List[FilterFn] = []
        self._rules: List[EventRule[InfoT]] = []
        self._lines_processed = 0
        self._events_fired = 0

    @property
    def rules(self) -> List[EventRule[InfoT]]:
        return list(self._rules)

    def register_filter(self, filter_fn: FilterFn) -> None:
        """Append a filter to the end of the chain."""

        self._filters.append(filter_fn)

    def register_event(self, pattern: str, handler: HandlerFn, name: Optional[str] = None) -> EventRule[InfoT]:
        """Compile ``pattern`` and register ``handler`` for its matches.

        Raises ``PatternError`` for invalid syntax; earlier registrations are
        left as they were.
        """

        try:
            compiled = re.compile(pattern)
        except re.error as exc:
            raise PatternError(pattern, str(exc)) from exc

        rule = EventRule(name=name or pattern, pattern=compiled, handler=handler)
        self._rules.append(rule)
        LOGGER.debug("Registered event rule %s", rule.name)
        return rule

    def process_line(self, line: str) -> int:
        """Filter one raw line and fire every matching rule.

        Returns the number of handlers invoked. Each handler receives its own
        copy of the line info.
        """

        info = self._info_factory()
        for filter_fn in self._filters:
            line = filter_fn(line, info)

        fired = 0
        for rule in self._rules:
            match = rule.pattern.search(line)
            if match is None:
                continue
            try:
                rule.handler(match, copy.deepcopy(info))
            except Exception as exc:
                LOGGER.error("Handler for rule %s failed: %s", rule.name, exc)
                raise HandlerError(rule.name, line) from exc
            fired += 1

        self._lines_processed += 1
        self._events_fired += fired
        return fired

    def run(self) -> None:
        """Process polled lines until the poller is cancelled.

        Read and decode errors from the poller, and ``HandlerError`` from a
        failing handler, propagate and end the loop.
        """

        LOGGER.info("Dispatch loop started (%s filters, %s rules)", len(self._filters), len(self._rules))
        while True:
            try:
                lines = self._line_poll.wait_and_read()
            except PollCancelled:
                LOGGER.info("Dispatch loop stopped after %s lines", self._lines_processed)
                return
            # The whole batch is handled before the next poll, in arrival order.
            for line in lines:
                self.process_line(line)

    def stats(self) -> dict:
        return {
            "filters": len(self._filters),
            "rules": len(self._rules),
            "lines_processed": self._lines_processed,
            "events_fired": self._events_fired,
        }
