"""Static configuration for exilewatch.

All user-editable settings (log path, polling, channel, logging) live in a
single JSON file for quick edits without touching Python. Environment
variables (optionally from a .env file) can point at another config file or
another log file.
"""

import json
import os

from dotenv import load_dotenv

from core.channel import OVERFLOW_POLICIES
from core.config import ChannelConfig, PollConfig

load_dotenv()

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

CONFIG_PATH = os.getenv("EXILEWATCH_CONFIG") or os.path.join(PROJECT_ROOT, "config.json")

DEFAULT_LOG_PATH = "C:\\Program Files (x86)\\Steam\\steamapps\\common\\Path of Exile\\logs\\Client.txt"


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(
            f"Config file not found: {CONFIG_PATH}. Set EXILEWATCH_CONFIG to the config.json path "
            "when running from an installed package."
        )

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# The tailed client log; the environment wins over the config file.
LOG_PATH = os.getenv("EXILEWATCH_LOG_PATH") or _CONFIG.get("log_path") or DEFAULT_LOG_PATH

# Polling controls for the byte -> line stack.
# - wait_delay_ms: sleep between empty reads
# - buffer_len: bytes read per poll attempt
# - carry_partial: keep split UTF-8 codepoints for the next poll instead of failing
# - from_start: read the whole existing file before tailing
_poll = _CONFIG.get("poll", {})
POLL = PollConfig(
    wait_delay_ms=int(_poll.get("wait_delay_ms", 20)),
    buffer_len=int(_poll.get("buffer_len", 1024)),
    carry_partial=bool(_poll.get("carry_partial", False)),
    from_start=bool(_poll.get("from_start", True)),
)

# Channel bound between the dispatch thread and the console.
# max_size=0 keeps the channel unbounded.
_channel = _CONFIG.get("channel", {})
CHANNEL = ChannelConfig(
    max_size=int(_channel.get("max_size", 0)),
    overflow=str(_channel.get("overflow", "block")),
)
if CHANNEL.overflow not in OVERFLOW_POLICIES:
    raise ValueError(f"channel.overflow must be one of {', '.join(OVERFLOW_POLICIES)}")

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
