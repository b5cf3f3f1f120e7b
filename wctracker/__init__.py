"""wc-tracker package initialization."""

from __future__ import annotations

from .api import (
    clear,
    data_dir_context,
    make_tracker,
    set_data_dir,
    show,
    track,
    update,
)
from .errors import TrackerError
from .services.diff_service import DiffOracle, WordCounts
from .services.tracker_service import Tracker, TrackingSummary

__all__ = [
    "__version__",
    "DiffOracle",
    "Tracker",
    "TrackerError",
    "TrackingSummary",
    "WordCounts",
    "clear",
    "data_dir_context",
    "get_version",
    "make_tracker",
    "set_data_dir",
    "show",
    "track",
    "update",
]

__version__ = "0.3.0"


def get_version() -> str:
    """Return the current package version."""
    return __version__
