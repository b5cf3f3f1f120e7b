import json

import pytest

from wctracker import cache as cache_module
from wctracker.cache import FileEntry, TrackingIndex
from wctracker.config import ClockStart, Config
from wctracker.errors import IndexSchemaError, StorageIOError


def _sample_index() -> TrackingIndex:
    return TrackingIndex(
        config=Config(interval=2, clock_start=ClockStart(6, 0)),
        window_id="2026-03-10",
        files={
            "abc": FileEntry(path="/notes/a.md", added=4, removed=1, updated_at=1700),
            "def": FileEntry(path="/notes/b.txt"),
        },
    )


def test_load_index_defaults_when_missing(tmp_path):
    index = cache_module.load_index(tmp_path / "data")

    assert index.files == {}
    assert index.window_id is None
    assert index.config == Config()
    assert index.dirty is False


def test_save_and_load_index(tmp_path):
    data_dir = tmp_path / "data"
    index = _sample_index()
    index.dirty = True

    path = cache_module.save_index(data_dir, index)

    assert path == data_dir / "index.json"
    assert index.dirty is False
    assert not (data_dir / "index.json.tmp").exists()
    stored = json.loads(path.read_text(encoding="utf-8"))
    assert stored["version"] == cache_module.INDEX_VERSION
    assert stored["currentWindowId"] == "2026-03-10"
    assert stored["configuration"] == {"interval": 2, "clockStart": {"hour": 6, "minute": 0}}
    assert stored["files"]["abc"] == {
        "path": "/notes/a.md",
        "added": 4,
        "removed": 1,
        "updatedAtEpochMillis": 1700,
    }
    assert cache_module.load_index(data_dir) == index


def test_save_index_output_is_stable(tmp_path):
    first = cache_module.save_index(tmp_path / "one", _sample_index()).read_text(encoding="utf-8")
    second = cache_module.save_index(tmp_path / "two", _sample_index()).read_text(encoding="utf-8")

    assert first == second


def test_load_index_rejects_invalid_json(tmp_path):
    (tmp_path / "index.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(IndexSchemaError):
        cache_module.load_index(tmp_path)


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"version": 99, "files": {}},
        {"files": {}},
        {"version": 1, "files": []},
        {"version": 1, "files": ""},
        {"version": 1, "files": 0},
        {"version": 1, "files": False},
        {"version": 1, "files": None},
        {"version": 1, "currentWindowId": 5, "files": {}},
        {"version": 1, "files": {"abc": {"added": 1}}},
        {"version": 1, "files": {"abc": {"path": "/a", "added": -3}}},
        {"version": 1, "configuration": {"interval": 0}, "files": {}},
    ],
)
def test_load_index_rejects_bad_layout(tmp_path, payload):
    (tmp_path / "index.json").write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(IndexSchemaError):
        cache_module.load_index(tmp_path)


def test_load_index_accepts_missing_files_key(tmp_path):
    (tmp_path / "index.json").write_text(json.dumps({"version": 1}), encoding="utf-8")

    assert cache_module.load_index(tmp_path).files == {}


def test_load_index_wraps_read_errors(tmp_path):
    (tmp_path / "index.json").mkdir()

    with pytest.raises(StorageIOError):
        cache_module.load_index(tmp_path)


def test_file_identifier_is_stable_hex():
    first = cache_module.file_identifier("/notes/a.md")

    assert first == cache_module.file_identifier("/notes/a.md")
    assert first != cache_module.file_identifier("/notes/b.md")
    assert len(first) == 40
    int(first, 16)


def test_snapshot_path_keeps_suffix(tmp_path):
    window = cache_module.window_dir(tmp_path, "2026-03-10")

    assert window == tmp_path / "tmp" / "2026-03-10"
    assert cache_module.snapshot_path(window, "abc", "/notes/a.md") == window / "abc.md"
    assert cache_module.snapshot_path(window, "abc", "/notes/README") == window / "abc"


def test_file_entry_reset():
    entry = FileEntry(path="/a", added=3, removed=2, updated_at=1)

    entry.reset(500)

    assert (entry.added, entry.removed, entry.updated_at) == (0, 0, 500)


def test_clear_storage_removes_index_and_cache(tmp_path):
    cache_module.save_index(tmp_path, _sample_index())
    window = cache_module.window_dir(tmp_path, "2026-03-10")
    window.mkdir(parents=True)
    (window / "abc.md").write_text("snapshot")

    assert cache_module.clear_storage(tmp_path) is True
    assert not (tmp_path / "index.json").exists()
    assert not (tmp_path / "tmp").exists()
    assert cache_module.clear_storage(tmp_path) is False


def test_remove_tree_reports_missing(tmp_path):
    assert cache_module.remove_tree(tmp_path / "absent") is False
