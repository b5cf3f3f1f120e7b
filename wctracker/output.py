"""Helpers for formatting CLI output safely across terminals."""

from __future__ import annotations

import sys

from rich.console import Console


def _encoding_supports(text: str, encoding: str | None) -> bool:
    if not encoding:
        return False
    try:
        text.encode(encoding)
    except Exception:
        return False
    return True


def supports_unicode_output(console: Console | None = None) -> bool:
    sample = "▲▼"
    if console is not None and _encoding_supports(sample, console.encoding):
        return True
    return _encoding_supports(sample, sys.stdout.encoding)


def plural_suffix(count: int) -> str:
    return "s" if count != 1 else ""


def format_net_change(net: int, console: Console | None = None) -> str:
    """Return *net* with a coloured direction marker."""
    if supports_unicode_output(console):
        up, down = "▲", "▼"
    else:
        up, down = "+", "-"
    if net > 0:
        return f"[green]{up}{net}[/green]"
    if net < 0:
        return f"[red]{down}{abs(net)}[/red]"
    return "0"
