"""Configuration defaults, data directory resolution, and option validation."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

from .text import Messages

DEFAULT_DATA_DIR = Path(os.path.expanduser("~")) / ".wc-tracker"
DATA_DIR = DEFAULT_DATA_DIR
_DATA_DIR_OVERRIDE: ContextVar[Path | None] = ContextVar(
    "wctracker_data_dir_override",
    default=None,
)
INDEX_FILENAME = "index.json"
CACHE_DIRNAME = "tmp"
DEFAULT_INTERVAL = 1
DEFAULT_CLOCK_HOUR = 4
DEFAULT_CLOCK_MINUTE = 0
DEFAULT_DIFF_TIMEOUT = 30.0
DEFAULT_CONCURRENCY = max(1, min(8, os.cpu_count() or 1))
SUPPORTED_OPTIONS: tuple[str, ...] = ("interval", "clockStart")
_OPTION_ALIASES = {
    "interval": "interval",
    "clockstart": "clockStart",
    "clock-start": "clockStart",
    "clock_start": "clockStart",
}
_CLOCK_START_PATTERN = re.compile(r"^(\d{1,2})(?::(\d{2}))?$", re.ASCII)


@dataclass(frozen=True, slots=True)
class ClockStart:
    hour: int = DEFAULT_CLOCK_HOUR
    minute: int = DEFAULT_CLOCK_MINUTE

    def __str__(self) -> str:
        return f"{self.hour}:{self.minute:02d}"


DEFAULT_CLOCK_START = ClockStart()


@dataclass(slots=True)
class Config:
    interval: int = DEFAULT_INTERVAL
    clock_start: ClockStart = field(default_factory=ClockStart)


def resolve_data_dir() -> Path:
    override = _DATA_DIR_OVERRIDE.get()
    return override if override is not None else DATA_DIR


def _validate_dir(path: Path | str) -> Path:
    dir_path = Path(path).expanduser().resolve()
    if dir_path.exists() and not dir_path.is_dir():
        raise NotADirectoryError(Messages.ERROR_DATA_DIR_NOT_DIR.format(path=dir_path))
    return dir_path


@contextmanager
def data_dir_context(path: Path | str | None):
    """Temporarily override the data directory for the current context."""

    if path is None:
        yield
        return
    token = _DATA_DIR_OVERRIDE.set(_validate_dir(path))
    try:
        yield
    finally:
        _DATA_DIR_OVERRIDE.reset(token)


def set_data_dir(path: Path | str | None) -> None:
    global DATA_DIR
    if path is None:
        DATA_DIR = DEFAULT_DATA_DIR
        return
    DATA_DIR = _validate_dir(path)


def normalize_option_name(name: str) -> str | None:
    """Map CLI and API spellings of an option onto its canonical name."""
    return _OPTION_ALIASES.get((name or "").strip().lower())


def coerce_interval(value: object) -> int:
    """Return *value* as a positive number of days or raise ``ValueError``."""
    error = ValueError(Messages.ERROR_INTERVAL_INVALID.format(value=value))
    if isinstance(value, bool):
        raise error
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise error
        parsed = int(value)
    elif isinstance(value, str):
        cleaned = value.strip()
        if not (cleaned.isascii() and cleaned.isdigit()):
            raise error
        parsed = int(cleaned)
    else:
        raise error
    if parsed <= 0:
        raise error
    return parsed


def parse_clock_start(value: object) -> ClockStart:
    """Parse ``H`` or ``H:MM`` (24-hour) into a :class:`ClockStart`."""
    if isinstance(value, ClockStart):
        return value
    error = ValueError(Messages.ERROR_CLOCK_START_INVALID.format(value=value))
    if isinstance(value, Mapping):
        hour = value.get("hour")
        minute = value.get("minute", 0)
        if isinstance(hour, bool) or isinstance(minute, bool):
            raise error
        if not isinstance(hour, int) or not isinstance(minute, int):
            raise error
    elif isinstance(value, str):
        match = _CLOCK_START_PATTERN.match(value.strip())
        if not match:
            raise error
        hour = int(match.group(1))
        minute = int(match.group(2) or 0)
    else:
        raise error
    if not 0 <= hour <= 23 or not 0 <= minute <= 59:
        raise error
    return ClockStart(hour=hour, minute=minute)


def config_from_payload(raw: object) -> Config:
    """Build a :class:`Config` from the persisted ``configuration`` object."""
    if raw is None:
        return Config()
    if not isinstance(raw, Mapping):
        raise ValueError("configuration must be an object")
    config = Config()
    if raw.get("interval") is not None:
        config.interval = coerce_interval(raw["interval"])
    if raw.get("clockStart") is not None:
        config.clock_start = parse_clock_start(raw["clockStart"])
    return config


def config_to_payload(config: Config) -> Dict[str, Any]:
    return {
        "interval": config.interval,
        "clockStart": {
            "hour": config.clock_start.hour,
            "minute": config.clock_start.minute,
        },
    }
