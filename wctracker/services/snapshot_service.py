"""Per-window snapshot cache for tracked files."""

from __future__ import annotations

import os
import shutil
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path

from ..cache import TrackingIndex, cache_root, remove_tree, snapshot_path, window_dir
from ..config import DEFAULT_CONCURRENCY
from ..errors import SnapshotError, StorageIOError
from ..text import Messages


@dataclass(frozen=True, slots=True)
class SnapshotResult:
    identifier: str
    path: Path
    created: bool
    modified_at: int = 0


def ensure_snapshot(identifier: str, live_path: Path, window_path: Path) -> SnapshotResult:
    """Copy *live_path* into *window_path* unless a snapshot already exists.

    The copy uses exclusive creation, so an existing snapshot is never
    overwritten; ``created`` tells the caller which case applied.
    ``modified_at`` is the live file's mtime, in epoch milliseconds, as seen
    when it was opened.
    """

    destination = snapshot_path(window_path, identifier, live_path)
    if not live_path.is_file():
        raise SnapshotError(live_path, Messages.ERROR_NOT_REGULAR_FILE.format(path=live_path))
    try:
        source = live_path.open("rb")
    except OSError as exc:
        raise SnapshotError(
            live_path,
            Messages.ERROR_NOT_READABLE.format(path=live_path, reason=exc.strerror or exc),
        ) from exc
    with source:
        modified_at = os.fstat(source.fileno()).st_mtime_ns // 1_000_000
        try:
            window_path.mkdir(parents=True, exist_ok=True)
            target = destination.open("xb")
        except FileExistsError:
            return SnapshotResult(
                identifier=identifier,
                path=destination,
                created=False,
                modified_at=modified_at,
            )
        except OSError as exc:
            raise StorageIOError(
                Messages.ERROR_SNAPSHOT_WRITE.format(path=destination, reason=exc)
            ) from exc
        try:
            with target:
                shutil.copyfileobj(source, target)
        except OSError as exc:
            destination.unlink(missing_ok=True)
            raise StorageIOError(
                Messages.ERROR_SNAPSHOT_WRITE.format(path=destination, reason=exc)
            ) from exc
    return SnapshotResult(
        identifier=identifier,
        path=destination,
        created=True,
        modified_at=modified_at,
    )


def discard_stale_windows(data_dir: Path, keep: str) -> list[Path]:
    """Remove every window directory under the cache root except *keep*."""

    root = cache_root(data_dir)
    if not root.is_dir():
        return []
    removed: list[Path] = []
    for entry in sorted(root.iterdir()):
        if entry.name == keep:
            continue
        if entry.is_dir():
            remove_tree(entry)
        else:
            entry.unlink(missing_ok=True)
        removed.append(entry)
    return removed


def recreate_all(
    index: TrackingIndex,
    data_dir: Path,
    window_id: str,
    *,
    evaluated_at: int,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> list[SnapshotError]:
    """Start window *window_id*: snapshot every tracked file and zero its counts.

    Snapshots that already exist in the new window (left behind by an
    interrupted rotation) are kept as they are. Each entry restarts from the
    mtime seen while snapshotting it, or *evaluated_at* when that failed. A
    storage failure is raised once every copy has finished, before any entry
    is touched.
    """

    discard_stale_windows(data_dir, keep=window_id)
    target_dir = window_dir(data_dir, window_id)
    target_dir.mkdir(parents=True, exist_ok=True)
    failures: list[SnapshotError] = []
    modified: dict[str, int] = {}
    fatal: StorageIOError | None = None
    if index.files:
        max_workers = max(1, min(int(concurrency or 1), len(index.files)))
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_map = {
                executor.submit(
                    ensure_snapshot, identifier, Path(entry.path), target_dir
                ): identifier
                for identifier, entry in index.files.items()
            }
            for future in as_completed(future_map):
                try:
                    modified[future_map[future]] = future.result().modified_at
                except SnapshotError as exc:
                    failures.append(exc)
                except StorageIOError as exc:
                    if fatal is None:
                        fatal = exc
    if fatal is not None:
        raise fatal
    failures.sort(key=lambda exc: str(exc.path))
    for identifier, entry in index.files.items():
        entry.reset(modified.get(identifier, evaluated_at))
    index.dirty = True
    return failures
