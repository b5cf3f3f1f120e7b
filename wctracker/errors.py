"""Error types raised or reported by the tracking engine."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .services.tracker_service import TrackingSummary


class TrackerError(Exception):
    """Base class for every wc-tracker error."""

    partial: "TrackingSummary | None" = None


class ConfigValidationError(TrackerError, ValueError):
    """An option name or value was rejected; the previous value is kept."""

    def __init__(self, key: str, value: object, message: str) -> None:
        super().__init__(message)
        self.key = key
        self.value = value


class PathResolutionError(TrackerError, ValueError):
    """The list of paths to track was empty."""


class SnapshotError(TrackerError):
    """A single file could not be snapshotted."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(message)
        self.path = path


class NotFoundError(TrackerError):
    """A tracked file is missing from disk."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(message)
        self.path = path


class DiffToolError(TrackerError, RuntimeError):
    """The external word-diff command failed."""

    def __init__(self, message: str, *, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode


class StorageIOError(TrackerError, OSError):
    """Unexpected filesystem failure while reading or writing tracking data."""


class IndexSchemaError(StorageIOError):
    """The persisted index cannot be decoded or has an incompatible layout."""


class ClearNotConfirmedError(TrackerError, ValueError):
    """Clearing was requested without an explicit confirmation."""
