"""Runtime configuration for json-tail."""

from __future__ import annotations

import json
import math
import os
import threading
from dataclasses import dataclass, field, replace
from pathlib import Path

from .exceptions import ConfigError
from .spinner import DEFAULT_FRAMES

DEFAULT_INTERVAL_SECONDS = 1.0
DEFAULT_INITIAL_ENTRIES = 10
DEFAULT_LOG_FILE = Path.home() / ".cache" / "json-tail" / "json-tail.log"


def is_valid_interval(seconds: float) -> bool:
    """Whether seconds is usable as a wait timeout: finite, positive, not too large."""
    return math.isfinite(seconds) and 0 < seconds <= threading.TIMEOUT_MAX


@dataclass(frozen=True)
class Config:
    """Runtime configuration built from defaults, config.json and CLI flags."""

    interval_seconds: float = DEFAULT_INTERVAL_SECONDS
    initial_entries: int = DEFAULT_INITIAL_ENTRIES
    frames: tuple[str, ...] = field(default=DEFAULT_FRAMES)
    log_file: Path = DEFAULT_LOG_FILE
    debug: bool = False

    def __post_init__(self) -> None:
        if not is_valid_interval(self.interval_seconds):
            raise ValueError(
                f"interval_seconds must be a finite positive number, got {self.interval_seconds}"
            )
        if self.initial_entries < 0:
            raise ValueError(f"initial_entries must not be negative, got {self.initial_entries}")

    @classmethod
    def from_dict(cls, payload: dict) -> Config:
        """Create a Config object from a raw dictionary."""
        frames_raw = payload.get("frames") or DEFAULT_FRAMES
        if isinstance(frames_raw, str) or not all(isinstance(f, str) for f in frames_raw):
            raise TypeError("frames must be a list of strings")

        log_file = payload.get("log_file")
        return cls(
            interval_seconds=float(payload.get("interval_seconds", DEFAULT_INTERVAL_SECONDS)),
            initial_entries=int(payload.get("initial_entries", DEFAULT_INITIAL_ENTRIES)),
            frames=tuple(frames_raw),
            log_file=(
                Path(os.path.expanduser(log_file)).resolve() if log_file else DEFAULT_LOG_FILE
            ),
            debug=bool(payload.get("debug", False)),
        )

    def with_overrides(self, **overrides: object) -> Config:
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)


def load_config(path: Path) -> Config:
    """Load configuration from the provided path.

    Raises:
        ConfigError: If the file cannot be read, is not valid JSON, or holds
            invalid values.
    """
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except OSError as err:
        raise ConfigError(f"cannot read config file {path}: {err}") from err
    except json.JSONDecodeError as err:
        raise ConfigError(f"config file {path} is not valid JSON: {err}") from err

    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a JSON object")

    try:
        return Config.from_dict(data)
    except (TypeError, ValueError) as err:
        raise ConfigError(f"invalid config in {path}: {err}") from err
