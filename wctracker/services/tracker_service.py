"""Logic behind `wc-tracker`, `wc-tracker <path>`, and `wc-tracker clear`."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import NoReturn

from .config_service import ConfigUpdateResult, apply_config_updates
from .diff_service import DiffOracle, GitWordDiffOracle, WordCounts
from .snapshot_service import SnapshotResult, ensure_snapshot, recreate_all
from ..cache import (
    FileEntry,
    TrackingIndex,
    clear_storage,
    file_identifier,
    load_index,
    save_index,
    snapshot_path,
    window_dir,
)
from ..clock import current_window_id, epoch_millis, has_elapsed
from ..config import DEFAULT_CONCURRENCY
from ..errors import (
    ClearNotConfirmedError,
    DiffToolError,
    NotFoundError,
    PathResolutionError,
    SnapshotError,
    StorageIOError,
    TrackerError,
)
from ..text import Messages


@dataclass(slots=True)
class TrackingSummary:
    added: int = 0
    removed: int = 0
    file_count: int = 0
    newly_tracked: list[Path] = field(default_factory=list)
    issues: list[TrackerError] = field(default_factory=list)
    window_id: str | None = None
    rotated: bool = False
    config_update: ConfigUpdateResult | None = None

    @property
    def net(self) -> int:
        return self.added - self.removed


@dataclass(slots=True)
class _Evaluation:
    identifier: str
    counts: WordCounts | None = None
    issue: TrackerError | None = None
    modified_at: int = 0


def resolve_track_paths(paths: Iterable[Path | str] | None) -> list[Path]:
    """Return absolute, de-duplicated paths or raise :class:`PathResolutionError`."""

    resolved: list[Path] = []
    seen: set[Path] = set()
    for raw in paths or ():
        if raw is None:
            continue
        text = str(raw).strip()
        if not text:
            continue
        path = Path(text).expanduser().resolve()
        if path in seen:
            continue
        seen.add(path)
        resolved.append(path)
    if not resolved:
        raise PathResolutionError(Messages.ERROR_PATHS_EMPTY)
    return resolved


def _mtime_millis(path: Path) -> int:
    return path.stat().st_mtime_ns // 1_000_000


class Tracker:
    """Coordinates the index, the window clock, snapshots and the diff oracle."""

    def __init__(
        self,
        data_dir: Path,
        *,
        oracle: DiffOracle | None = None,
        clock: Callable[[], datetime] = datetime.now,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        self.data_dir = Path(data_dir)
        self.oracle = oracle if oracle is not None else GitWordDiffOracle()
        self.clock = clock
        self.concurrency = max(int(concurrency or 1), 1)

    def show(self) -> TrackingIndex:
        """Return the persisted index without rotating or evaluating anything."""
        return load_index(self.data_dir)

    def update(self, options: Mapping[str, object] | None = None) -> TrackingSummary:
        """Re-evaluate every tracked file and return the totals."""
        index, summary = self._prepare(options)
        identifiers = list(index.files)
        self._evaluate(index, identifiers, summary)
        self._aggregate(index, identifiers, summary)
        self._finish(index)
        return summary

    def track(
        self,
        paths: Iterable[Path | str] | None,
        options: Mapping[str, object] | None = None,
    ) -> TrackingSummary:
        """Start tracking new *paths* and report progress for already tracked ones."""
        resolved = resolve_track_paths(paths)
        index, summary = self._prepare(options)
        target_dir = window_dir(self.data_dir, summary.window_id)
        existing: list[str] = []
        fatal: TrackerError | None = None

        max_workers = min(self.concurrency, len(resolved))
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_map = {
                executor.submit(ensure_snapshot, file_identifier(path), path, target_dir): path
                for path in resolved
            }
            outcomes: dict[Path, SnapshotResult | SnapshotError] = {}
            for future in as_completed(future_map):
                path = future_map[future]
                try:
                    outcomes[path] = future.result()
                except SnapshotError as exc:
                    outcomes[path] = exc
                except StorageIOError as exc:
                    if fatal is None:
                        fatal = exc

        # Apply in input order so the report is stable.
        for path in resolved:
            outcome = outcomes.get(path)
            if outcome is None:
                continue
            if isinstance(outcome, SnapshotError):
                summary.issues.append(outcome)
                continue
            identifier = outcome.identifier
            if outcome.created:
                index.files[identifier] = FileEntry(
                    path=str(path), updated_at=outcome.modified_at
                )
                index.dirty = True
                summary.newly_tracked.append(path)
                continue
            if identifier not in index.files:
                # Snapshot survived but the entry was never saved; diff it now.
                index.files[identifier] = FileEntry(path=str(path))
                index.dirty = True
            existing.append(identifier)

        if fatal is not None:
            self._fail(index, existing, summary, fatal)
        self._evaluate(index, existing, summary)
        self._aggregate(index, existing, summary)
        self._finish(index)
        return summary

    def clear(self, *, confirm: bool) -> bool:
        """Delete the index and snapshot cache; requires ``confirm=True``."""
        if confirm is not True:
            raise ClearNotConfirmedError(Messages.ERROR_CLEAR_UNCONFIRMED)
        return clear_storage(self.data_dir)

    def _prepare(
        self, options: Mapping[str, object] | None
    ) -> tuple[TrackingIndex, TrackingSummary]:
        index = load_index(self.data_dir)
        summary = TrackingSummary()
        update = apply_config_updates(index.config, options)
        summary.config_update = update
        summary.issues.extend(update.rejected)
        if update.changed:
            index.dirty = True

        now = self.clock()
        summary.window_id = index.window_id
        if index.window_id is None or has_elapsed(
            index.window_id, index.config.interval, now, index.config.clock_start
        ):
            self._rotate(
                index,
                current_window_id(now, index.config.clock_start),
                epoch_millis(now),
                summary,
            )
        return index, summary

    def _rotate(
        self,
        index: TrackingIndex,
        window_id: str,
        now_ms: int,
        summary: TrackingSummary,
    ) -> None:
        try:
            failures = recreate_all(
                index,
                self.data_dir,
                window_id,
                evaluated_at=now_ms,
                concurrency=self.concurrency,
            )
        except StorageIOError as exc:
            # The previous window stays current; the next run rotates again.
            self._fail(index, list(index.files), summary, exc)
        summary.issues.extend(failures)
        index.window_id = window_id
        index.dirty = True
        summary.window_id = window_id
        summary.rotated = True

    def _evaluate_one(
        self,
        identifier: str,
        entry: FileEntry,
        target_dir: Path,
    ) -> _Evaluation:
        live = Path(entry.path)
        try:
            modified = _mtime_millis(live)
        except FileNotFoundError:
            return _Evaluation(
                identifier,
                issue=NotFoundError(live, Messages.ERROR_FILE_MISSING.format(path=live)),
            )
        except OSError as exc:
            raise StorageIOError(
                Messages.ERROR_NOT_READABLE.format(path=live, reason=exc)
            ) from exc
        if modified <= entry.updated_at:
            return _Evaluation(identifier)
        snapshot = snapshot_path(target_dir, identifier, live)
        if not snapshot.exists():
            try:
                result = ensure_snapshot(identifier, live, target_dir)
            except SnapshotError as exc:
                return _Evaluation(identifier, issue=exc)
            if result.created:
                return _Evaluation(identifier, counts=WordCounts(), modified_at=result.modified_at)
        return _Evaluation(
            identifier,
            counts=self.oracle.compare(snapshot, live),
            modified_at=modified,
        )

    def _evaluate(
        self,
        index: TrackingIndex,
        identifiers: list[str],
        summary: TrackingSummary,
    ) -> None:
        """Diff *identifiers* concurrently and apply the results on this thread.

        Every task is allowed to finish. The first fatal error is raised
        afterwards with the totals computed so far attached as ``partial``.
        An evaluated entry records the live mtime it was compared at.
        """
        if not identifiers:
            return
        target_dir = window_dir(self.data_dir, index.window_id)
        fatal: TrackerError | None = None
        max_workers = min(self.concurrency, len(identifiers))
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_map = {
                executor.submit(
                    self._evaluate_one, identifier, index.files[identifier], target_dir
                ): identifier
                for identifier in identifiers
            }
            for future in as_completed(future_map):
                try:
                    evaluation = future.result()
                except (DiffToolError, StorageIOError) as exc:
                    if fatal is None:
                        fatal = exc
                    continue
                if evaluation.issue is not None:
                    summary.issues.append(evaluation.issue)
                if evaluation.counts is None:
                    continue
                entry = index.files[evaluation.identifier]
                entry.added = evaluation.counts.added
                entry.removed = evaluation.counts.removed
                entry.updated_at = evaluation.modified_at
                index.dirty = True
        if fatal is not None:
            self._fail(index, identifiers, summary, fatal)

    def _fail(
        self,
        index: TrackingIndex,
        identifiers: list[str],
        summary: TrackingSummary,
        fatal: TrackerError,
    ) -> NoReturn:
        """Save what was applied, attach the partial totals, and raise *fatal*."""
        self._aggregate(index, identifiers, summary)
        fatal.partial = summary
        self._finish(index)
        raise fatal

    def _aggregate(
        self,
        index: TrackingIndex,
        identifiers: list[str],
        summary: TrackingSummary,
    ) -> None:
        summary.added = 0
        summary.removed = 0
        summary.file_count = 0
        for identifier in identifiers:
            entry = index.files.get(identifier)
            if entry is None:
                continue
            summary.added += entry.added
            summary.removed += entry.removed
            summary.file_count += 1

    def _finish(self, index: TrackingIndex) -> None:
        if index.dirty:
            save_index(self.data_dir, index)
