"""Word-level comparison between a snapshot and its live file."""

from __future__ import annotations

import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

from ..config import DEFAULT_DIFF_TIMEOUT
from ..errors import DiffToolError
from ..text import Messages

# Latin letters/digits/apostrophes, CJK + Hiragana + Hangul + Cyrillic,
# Armenian, Greek and Coptic, then ASCII \w as a catch-all.
WORD_PATTERN = re.compile(
    r"['\u02BC0-9A-Za-z\u00C0-\u00D6\u00D8-\u00F6"
    r"\u00F8-\u00FF\u0100-\u017F\u0180-\u024F\u1E02-\u1EF3]+"
    r"|[\u4E00-\u9FFF\u3400-\u4DBF\uF900-\uFAFF\u3040-\u309F\uAC00-\uD7AF\u0400-\u04FF]+"
    r"|[\u0531-\u0556\u0561-\u0586\u0559\u055A\u055B]+"
    r"|[\u0374-\u03FF]+"
    r"|\w+",
    re.ASCII,
)
ADDED_MARKER = "+"
REMOVED_MARKER = "-"
HUNK_MARKER = "@@"
DIFF_EXIT_CLEAN = 0
DIFF_EXIT_CHANGED = 1


@dataclass(frozen=True, slots=True)
class WordCounts:
    added: int = 0
    removed: int = 0


class DiffOracle(Protocol):
    def compare(self, snapshot: Path, live: Path) -> WordCounts:
        ...


def count_words(text: str) -> int:
    """Return the number of words in *text*."""
    return len(WORD_PATTERN.findall(text))


def parse_porcelain(output: str) -> WordCounts:
    """Count added and removed words in ``git diff --word-diff=porcelain`` output.

    Everything up to and including the first hunk header is preamble; after
    that, ``+`` lines hold inserted words and ``-`` lines removed ones. Common
    text, ``~`` line breaks and later hunk headers are ignored. Only ``"\n"``
    separates lines.
    """
    added = 0
    removed = 0
    in_hunks = False
    for line in output.split("\n"):
        if not in_hunks:
            in_hunks = line.startswith(HUNK_MARKER)
            continue
        if line.startswith(ADDED_MARKER):
            added += count_words(line[1:])
        elif line.startswith(REMOVED_MARKER):
            removed += count_words(line[1:])
    return WordCounts(added=added, removed=removed)


class GitWordDiffOracle:
    """Diff oracle backed by ``git diff --no-index --word-diff=porcelain``."""

    def __init__(self, *, git: str = "git", timeout: float | None = DEFAULT_DIFF_TIMEOUT) -> None:
        self.git = git
        self.timeout = timeout

    def build_command(self, snapshot: Path, live: Path) -> list[str]:
        return [
            self.git,
            "--no-pager",
            "diff",
            "--no-index",
            "--no-color",
            "--word-diff=porcelain",
            str(snapshot),
            str(live),
        ]

    def compare(self, snapshot: Path, live: Path) -> WordCounts:
        command = self.build_command(snapshot, live)
        try:
            completed = subprocess.run(
                command,
                check=False,
                capture_output=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as exc:
            raise DiffToolError(
                Messages.ERROR_DIFF_MISSING.format(command=_format_command(command[:3]))
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise DiffToolError(
                Messages.ERROR_DIFF_TIMEOUT.format(timeout=self.timeout, path=live)
            ) from exc
        except OSError as exc:
            raise DiffToolError(
                Messages.ERROR_DIFF_FAILED.format(
                    command=_format_command(command[:3]), reason=exc.strerror or exc
                )
            ) from exc
        if completed.returncode not in (DIFF_EXIT_CLEAN, DIFF_EXIT_CHANGED):
            raise DiffToolError(
                Messages.ERROR_DIFF_EXIT.format(
                    code=completed.returncode,
                    path=live,
                    stderr=_decode(completed.stderr).strip(),
                ),
                returncode=completed.returncode,
            )
        if completed.returncode == DIFF_EXIT_CLEAN:
            return WordCounts()
        return parse_porcelain(_decode(completed.stdout))


def _decode(data: bytes | None) -> str:
    # Lone "\r" and other line-break characters stay inside their line.
    return (data or b"").decode("utf-8", errors="replace")


def _format_command(parts: Sequence[str]) -> str:
    return " ".join(parts)
