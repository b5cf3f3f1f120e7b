"""Public Python API for wc-tracker."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from pathlib import Path

from .cache import TrackingIndex
from .config import (
    DEFAULT_CONCURRENCY,
    DEFAULT_DIFF_TIMEOUT,
    data_dir_context,
    resolve_data_dir,
    set_data_dir,
)
from .services.diff_service import DiffOracle, GitWordDiffOracle
from .services.tracker_service import Tracker, TrackingSummary

__all__ = [
    "clear",
    "data_dir_context",
    "make_tracker",
    "set_data_dir",
    "show",
    "track",
    "update",
]


def _default_oracle() -> DiffOracle:
    return GitWordDiffOracle(timeout=DEFAULT_DIFF_TIMEOUT)


def make_tracker(
    *,
    data_dir: Path | str | None = None,
    oracle: DiffOracle | None = None,
    clock: Callable[[], datetime] | None = None,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> Tracker:
    """Build a :class:`Tracker`, resolving the data directory at this boundary."""

    if data_dir is not None:
        directory = Path(data_dir).expanduser().resolve()
    else:
        directory = resolve_data_dir()
    return Tracker(
        directory,
        oracle=oracle if oracle is not None else _default_oracle(),
        clock=clock or datetime.now,
        concurrency=concurrency,
    )


def update(
    options: Mapping[str, object] | None = None,
    *,
    data_dir: Path | str | None = None,
    oracle: DiffOracle | None = None,
    clock: Callable[[], datetime] | None = None,
) -> TrackingSummary:
    """Return words added and removed across every tracked file."""

    return make_tracker(data_dir=data_dir, oracle=oracle, clock=clock).update(options)


def track(
    paths: Iterable[Path | str],
    options: Mapping[str, object] | None = None,
    *,
    data_dir: Path | str | None = None,
    oracle: DiffOracle | None = None,
    clock: Callable[[], datetime] | None = None,
) -> TrackingSummary:
    """Start tracking *paths*; report progress for those already tracked."""

    return make_tracker(data_dir=data_dir, oracle=oracle, clock=clock).track(paths, options)


def clear(*, confirm: bool, data_dir: Path | str | None = None) -> bool:
    """Remove the tracking index and snapshot cache."""

    return make_tracker(data_dir=data_dir).clear(confirm=confirm)


def show(*, data_dir: Path | str | None = None) -> TrackingIndex:
    """Return the persisted tracking index as-is."""

    return make_tracker(data_dir=data_dir).show()
