"""Follow a JSON array-of-strings file and print entries as they are appended."""

from __future__ import annotations

from .app import JsonTailApp
from .channel import BatchChannel
from .config import Config, load_config
from .poller import EntryPoller
from .reader import last_n, new_entries, read_entries, validate_file
from .spinner import DEFAULT_FRAMES, StatusIndicator
from .terminal import Terminal

__version__ = "0.1.0"

__all__ = [
    "BatchChannel",
    "Config",
    "DEFAULT_FRAMES",
    "EntryPoller",
    "JsonTailApp",
    "StatusIndicator",
    "Terminal",
    "last_n",
    "load_config",
    "new_entries",
    "read_entries",
    "validate_file",
]
