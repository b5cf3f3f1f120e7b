"""Tracking index persistence and on-disk layout helpers."""

from __future__ import annotations

import hashlib
import json
import os
import shutil
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

from .config import (
    CACHE_DIRNAME,
    INDEX_FILENAME,
    Config,
    config_from_payload,
    config_to_payload,
)
from .errors import IndexSchemaError, StorageIOError
from .text import Messages

INDEX_VERSION = 1


@dataclass(slots=True)
class FileEntry:
    path: str
    added: int = 0
    removed: int = 0
    updated_at: int = 0

    def reset(self, evaluated_at: int) -> None:
        self.added = 0
        self.removed = 0
        self.updated_at = evaluated_at

    def to_payload(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "added": self.added,
            "removed": self.removed,
            "updatedAtEpochMillis": self.updated_at,
        }


@dataclass(slots=True)
class TrackingIndex:
    config: Config = field(default_factory=Config)
    window_id: str | None = None
    files: dict[str, FileEntry] = field(default_factory=dict)
    dirty: bool = field(default=False, compare=False)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "version": INDEX_VERSION,
            "configuration": config_to_payload(self.config),
            "currentWindowId": self.window_id,
            "files": {
                identifier: entry.to_payload()
                for identifier, entry in self.files.items()
            },
        }


def file_identifier(path: Path) -> str:
    """Return the stable identifier for an absolute *path*."""

    return hashlib.sha1(str(path).encode("utf-8")).hexdigest()


def index_path(data_dir: Path) -> Path:
    return data_dir / INDEX_FILENAME


def cache_root(data_dir: Path) -> Path:
    return data_dir / CACHE_DIRNAME


def window_dir(data_dir: Path, window_id: str) -> Path:
    return cache_root(data_dir) / window_id


def snapshot_path(window_path: Path, identifier: str, source: Path | str) -> Path:
    """Return where the snapshot of *source* lives; the suffix is kept for the diff tool."""

    return window_path / f"{identifier}{Path(source).suffix}"


def _non_negative_int(value: object, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{field_name} must be a non-negative integer")
    return value


def _parse_entry(identifier: str, raw: object) -> FileEntry:
    if not isinstance(raw, Mapping):
        raise ValueError(f"file entry {identifier} must be an object")
    path = raw.get("path")
    if not isinstance(path, str) or not path:
        raise ValueError(f"file entry {identifier} is missing its path")
    return FileEntry(
        path=path,
        added=_non_negative_int(raw.get("added", 0), "added"),
        removed=_non_negative_int(raw.get("removed", 0), "removed"),
        updated_at=_non_negative_int(
            raw.get("updatedAtEpochMillis", 0), "updatedAtEpochMillis"
        ),
    )


def _parse_index(raw: object) -> TrackingIndex:
    if not isinstance(raw, Mapping):
        raise ValueError("document must be an object")
    version = raw.get("version")
    if version != INDEX_VERSION:
        raise ValueError(f"expected version {INDEX_VERSION}, found {version!r}")
    window_id = raw.get("currentWindowId")
    if window_id is not None and not isinstance(window_id, str):
        raise ValueError("currentWindowId must be a string")
    files_raw = raw.get("files", {})
    if not isinstance(files_raw, Mapping):
        raise ValueError("files must be an object")
    files = {
        str(identifier): _parse_entry(str(identifier), entry)
        for identifier, entry in files_raw.items()
    }
    return TrackingIndex(
        config=config_from_payload(raw.get("configuration")),
        window_id=window_id,
        files=files,
    )


def load_index(data_dir: Path) -> TrackingIndex:
    """Load the index under *data_dir*, defaulting to an empty one when absent."""

    path = index_path(data_dir)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return TrackingIndex()
    except OSError as exc:
        raise StorageIOError(
            Messages.ERROR_INDEX_READ.format(path=path, reason=exc)
        ) from exc
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise IndexSchemaError(
            Messages.ERROR_INDEX_INVALID.format(path=path, reason=exc)
        ) from exc
    try:
        return _parse_index(raw)
    except ValueError as exc:
        raise IndexSchemaError(
            Messages.ERROR_INDEX_SCHEMA.format(path=path, reason=exc)
        ) from exc


def save_index(data_dir: Path, index: TrackingIndex) -> Path:
    """Write *index* atomically and clear its dirty flag."""

    path = index_path(data_dir)
    tmp = path.with_suffix(path.suffix + ".tmp")
    payload = json.dumps(index.to_payload(), ensure_ascii=False, indent=2, sort_keys=True)
    try:
        data_dir.mkdir(parents=True, exist_ok=True)
        tmp.write_text(payload + "\n", encoding="utf-8")
        os.replace(tmp, path)
    except OSError as exc:
        raise StorageIOError(
            Messages.ERROR_INDEX_WRITE.format(path=path, reason=exc)
        ) from exc
    index.dirty = False
    return path


def remove_tree(path: Path) -> bool:
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise StorageIOError(
            Messages.ERROR_STORAGE_REMOVE.format(path=path, reason=exc)
        ) from exc
    return True


def clear_storage(data_dir: Path) -> bool:
    """Remove the index and snapshot cache, returning True if anything existed."""

    removed = False
    path = index_path(data_dir)
    for candidate in (path, path.with_suffix(path.suffix + ".tmp")):
        try:
            candidate.unlink()
        except FileNotFoundError:
            continue
        except OSError as exc:
            raise StorageIOError(
                Messages.ERROR_STORAGE_REMOVE.format(path=candidate, reason=exc)
            ) from exc
        removed = True
    if remove_tree(cache_root(data_dir)):
        removed = True
    return removed
