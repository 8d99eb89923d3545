"""Application entry point for the exilewatch log tailer."""

from __future__ import annotations

import argparse
import io
import logging
import os
import sys
import threading
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint

import settings
from adapters.console import ConsoleConsumer
from adapters.poe_events import PoeEvents
from core.channel import EventChannel
from core.poll import LinePoll

LOGGER = logging.getLogger(__name__)

NAME = "EXILEWATCH"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/exilewatch.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


class _Producer:
    """Runs the dispatch loop on its own thread and closes the channel on exit."""

    def __init__(self, poe_events: PoeEvents, channel: EventChannel) -> None:
        self._poe_events = poe_events
        self._channel = channel
        self.error: Optional[BaseException] = None
        self.thread = threading.Thread(target=self._run, name="exilewatch-dispatch", daemon=True)

    def _run(self) -> None:
        try:
            self._poe_events.run()
        except Exception as exc:
            self.error = exc
            LOGGER.exception("Dispatch loop failed")
        finally:
            # Consumers treat closure as the end of the stream.
            self._channel.close()


def _run(log_path: str) -> int:
    _print_banner()
    _configure_logging()

    LOGGER.info("Starting exilewatch on %s", log_path)

    poll_config = settings.POLL
    channel_config = settings.CHANNEL
    channel = EventChannel(max_size=channel_config.max_size, overflow=channel_config.overflow)
    stop_event = threading.Event()

    with open(log_path, "rb") as stream:
        if not poll_config.from_start:
            stream.seek(0, io.SEEK_END)

        line_poll = LinePoll.from_stream(
            stream,
            wait_delay_ms=poll_config.wait_delay_ms,
            buffer_len=poll_config.buffer_len,
            stop_event=stop_event,
            carry_partial=poll_config.carry_partial,
        )
        poe_events = PoeEvents(line_poll, channel)
        poe_events.register_poe_events()

        producer = _Producer(poe_events, channel)
        producer.thread.start()
        interrupted = False
        try:
            ConsoleConsumer().consume(channel)
        except KeyboardInterrupt:
            interrupted = True
            LOGGER.info("Interrupted, stopping dispatch loop")
        finally:
            stop_event.set()
            # Wakes a producer blocked on a full channel.
            channel.close()
            producer.thread.join()

    LOGGER.info("Dispatch stats: %s", poe_events.engine.stats())
    return 1 if producer.error and not interrupted else 0


def _check(log_path: str) -> int:
    _configure_logging()

    poe_events = PoeEvents(LinePoll.from_stream(io.BytesIO()), EventChannel())
    poe_events.register_poe_events()
    stats = poe_events.engine.stats()
    print(f"Config: {settings.CONFIG_PATH}")
    print(f"Log file: {log_path} ({'found' if os.path.exists(log_path) else 'missing'})")
    print(f"Filters: {stats['filters']}, rules: {stats['rules']}")
    for rule in poe_events.engine.rules:
        print(f"- {rule.name}: {rule.pattern.pattern}")
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="exilewatch")
    parser.add_argument("--log-path", help="Client log to tail (overrides config.json)")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Tail the log and print events")
    subparsers.add_parser("check", help="Validate config and list event rules")

    args = parser.parse_args(argv)
    log_path = args.log_path or settings.LOG_PATH
    if args.command == "check":
        sys.exit(_check(log_path))
    sys.exit(_run(log_path))


if __name__ == "__main__":
    main()
