import shutil
import subprocess

import pytest

from wctracker.errors import DiffToolError
from wctracker.services import diff_service
from wctracker.services.diff_service import (
    GitWordDiffOracle,
    WordCounts,
    count_words,
    parse_porcelain,
)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("", 0),
        ("the cat sat", 3),
        ("hello, world!", 2),
        ("don't stop", 2),
        ("naïve café", 2),
        ("Привет мир", 2),
        ("日本語 한국어", 2),
        ("Հայերեն", 1),
        ("αβγ δέ", 2),
        ("— … ", 0),
        ("v2 release 2026", 3),
    ],
)
def test_count_words(text, expected):
    assert count_words(text) == expected


def test_parse_porcelain_counts_after_first_hunk():
    output = "\n".join(
        [
            "diff --git a/snap.md b/live.md",
            "index 3b18e51..a3c2a44 100644",
            "--- a/snap.md",
            "+++ b/live.md",
            "@@ -1 +1 @@",
            " the ",
            "-cat",
            "+dog",
            " sat",
            "+ down here",
            "~",
        ]
    )

    assert parse_porcelain(output) == WordCounts(added=3, removed=1)


def test_parse_porcelain_ignores_extended_header_lines():
    output = "\n".join(
        [
            "diff --git a/x.md b/y.md",
            "old mode 100644",
            "new mode 100755",
            "index 1111111..2222222",
            "--- a/x.md",
            "+++ b/y.md",
            "@@ -1,2 +1,2 @@",
            "-removed words",
            "~",
            "@@ -9 +9 @@",
            "+another",
            "~",
        ]
    )

    assert parse_porcelain(output) == WordCounts(added=1, removed=2)


def test_parse_porcelain_without_hunks_is_zero():
    assert parse_porcelain("") == WordCounts()
    assert parse_porcelain("--- a/x\n+++ b/y\n") == WordCounts()


def test_parse_porcelain_splits_on_newline_only():
    output = "@@ -1 +1 @@\n+alpha\u2028beta gamma\n-one\x0ctwo three\n+carriage\rreturn\n~\n"

    assert parse_porcelain(output) == WordCounts(added=5, removed=3)


def _fake_run(returncode, stdout=b"", stderr=b""):
    calls = []

    def runner(command, **kwargs):
        calls.append((command, kwargs))
        return subprocess.CompletedProcess(command, returncode, stdout=stdout, stderr=stderr)

    return runner, calls


def test_oracle_builds_git_command(monkeypatch, tmp_path):
    runner, calls = _fake_run(1, stdout=b"@@ -1 +1 @@\n+new words\n~\n")
    monkeypatch.setattr(diff_service.subprocess, "run", runner)

    counts = GitWordDiffOracle(timeout=5).compare(tmp_path / "snap.md", tmp_path / "live.md")

    assert counts == WordCounts(added=2, removed=0)
    command, kwargs = calls[0]
    assert command == [
        "git",
        "--no-pager",
        "diff",
        "--no-index",
        "--no-color",
        "--word-diff=porcelain",
        str(tmp_path / "snap.md"),
        str(tmp_path / "live.md"),
    ]
    assert kwargs["check"] is False
    assert kwargs["timeout"] == 5


def test_oracle_exit_zero_means_no_change(monkeypatch, tmp_path):
    runner, _ = _fake_run(0, stdout=b"+ignored\n")
    monkeypatch.setattr(diff_service.subprocess, "run", runner)

    assert GitWordDiffOracle().compare(tmp_path / "a", tmp_path / "b") == WordCounts()


def test_oracle_other_exit_codes_fail(monkeypatch, tmp_path):
    runner, _ = _fake_run(128, stderr=b"fatal: bad things\n")
    monkeypatch.setattr(diff_service.subprocess, "run", runner)

    with pytest.raises(DiffToolError) as excinfo:
        GitWordDiffOracle().compare(tmp_path / "a", tmp_path / "b")

    assert excinfo.value.returncode == 128
    assert "fatal: bad things" in str(excinfo.value)


def test_oracle_missing_git(monkeypatch, tmp_path):
    def runner(command, **kwargs):
        raise FileNotFoundError(command[0])

    monkeypatch.setattr(diff_service.subprocess, "run", runner)

    with pytest.raises(DiffToolError) as excinfo:
        GitWordDiffOracle(git="git-missing").compare(tmp_path / "a", tmp_path / "b")

    assert "git-missing --no-pager diff" in str(excinfo.value)


def test_oracle_timeout(monkeypatch, tmp_path):
    def runner(command, **kwargs):
        raise subprocess.TimeoutExpired(command, kwargs["timeout"])

    monkeypatch.setattr(diff_service.subprocess, "run", runner)

    with pytest.raises(DiffToolError) as excinfo:
        GitWordDiffOracle(timeout=0.5).compare(tmp_path / "a", tmp_path / "b")

    assert "0.5s" in str(excinfo.value)
    assert excinfo.value.returncode is None


def test_oracle_decodes_bytes_and_keeps_carriage_returns(monkeypatch, tmp_path):
    runner, calls = _fake_run(1, stdout="@@ -1 +1 @@\n+alpha\rbeta caf\u00e9\n~\n".encode("utf-8"))
    monkeypatch.setattr(diff_service.subprocess, "run", runner)

    counts = GitWordDiffOracle().compare(tmp_path / "a", tmp_path / "b")

    assert counts == WordCounts(added=3, removed=0)
    assert "text" not in calls[0][1]


def test_oracle_undecodable_output_is_replaced(monkeypatch, tmp_path):
    runner, _ = _fake_run(1, stdout=b"@@ -1 +1 @@\n+ok \xff\xfe done\n")
    monkeypatch.setattr(diff_service.subprocess, "run", runner)

    assert GitWordDiffOracle().compare(tmp_path / "a", tmp_path / "b") == WordCounts(added=2)


def test_oracle_wraps_other_os_errors(monkeypatch, tmp_path):
    def runner(command, **kwargs):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(diff_service.subprocess, "run", runner)

    with pytest.raises(DiffToolError) as excinfo:
        GitWordDiffOracle().compare(tmp_path / "a", tmp_path / "b")

    assert "Permission denied" in str(excinfo.value)


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
def test_oracle_against_real_git(tmp_path):
    snapshot = tmp_path / "snap.md"
    live = tmp_path / "live.md"
    snapshot.write_text("the quick brown fox\njumps over\n", encoding="utf-8")
    live.write_text("the slow brown fox\njumps over the dog\n", encoding="utf-8")
    oracle = GitWordDiffOracle()

    assert oracle.compare(snapshot, live) == WordCounts(added=3, removed=1)
    assert oracle.compare(snapshot, snapshot) == WordCounts()


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
def test_real_git_keeps_lone_carriage_return_in_line(tmp_path):
    snapshot = tmp_path / "snap.md"
    live = tmp_path / "live.md"
    snapshot.write_bytes(b"intro\n")
    live.write_bytes(b"intro\nalpha\rbeta gamma\n")

    assert GitWordDiffOracle().compare(snapshot, live) == WordCounts(added=3, removed=0)
