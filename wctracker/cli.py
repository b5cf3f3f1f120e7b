"""Command line interface for wc-tracker."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from difflib import get_close_matches
from pathlib import Path

import click
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from typer.core import TyperGroup

from . import __version__
from .api import make_tracker
from .cache import TrackingIndex
from .errors import PathResolutionError, TrackerError
from .output import format_net_change, plural_suffix
from .services.tracker_service import Tracker, TrackingSummary
from .text import Messages, Styles

console = Console()


class DefaultTrackGroup(TyperGroup):
    """Treat unknown subcommands as paths to track."""

    def resolve_command(
        self,
        ctx: click.Context,
        args: list[str],
    ) -> tuple[str | None, click.Command | None, list[str]]:
        if args and not self._is_command_token(ctx, args[0]):
            command = self.get_command(ctx, "track")
            if command is not None:
                return "track", command, list(args)
        return super().resolve_command(ctx, args)

    def _is_command_token(self, ctx: click.Context, token: str) -> bool:
        # Anything that is not a command, an option, or a near miss of a
        # command name is a path for `track`.
        if token.startswith("-") or self.get_command(ctx, token) is not None:
            return True
        if Path(token).exists():
            return False
        return bool(get_close_matches(token, list(self.commands.keys()), cutoff=0.8))


app = typer.Typer(
    help=Messages.APP_HELP,
    context_settings={"help_option_names": ["-h", "--help"]},
    cls=DefaultTrackGroup,
)


@dataclass(slots=True)
class CliState:
    interval: str | None = None
    clock_start: str | None = None
    verbose: bool = False
    data_dir: Path | None = None

    @property
    def options(self) -> dict[str, object]:
        return {"interval": self.interval, "clockStart": self.clock_start}


def _styled(text: str, style: str) -> str:
    return f"[{style}]{text}[/{style}]"


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"wc-tracker v{__version__}")
        raise typer.Exit()


def _state(ctx: typer.Context) -> CliState:
    state = ctx.find_object(CliState)
    return state if state is not None else CliState()


def _build_tracker(state: CliState) -> Tracker:
    return make_tracker(data_dir=state.data_dir)


def _interval_option():
    return typer.Option(None, "--interval", "-i", help=Messages.HELP_INTERVAL)


def _clock_start_option():
    return typer.Option(None, "--clock-start", "-c", help=Messages.HELP_CLOCK_START)


def _verbose_option():
    return typer.Option(False, "--verbose", "-v", help=Messages.HELP_VERBOSE)


def _data_dir_option():
    return typer.Option(None, "--data-dir", help=Messages.HELP_DATA_DIR)


def _merged_state(
    ctx: typer.Context,
    interval: str | None,
    clock_start: str | None,
    verbose: bool,
    data_dir: Path | None,
) -> CliState:
    """Let options given after a command override the ones given before it."""
    state = _state(ctx)
    return CliState(
        interval=interval if interval is not None else state.interval,
        clock_start=clock_start if clock_start is not None else state.clock_start,
        verbose=verbose or state.verbose,
        data_dir=data_dir if data_dir is not None else state.data_dir,
    )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    interval: str | None = _interval_option(),
    clock_start: str | None = _clock_start_option(),
    verbose: bool = _verbose_option(),
    data_dir: Path | None = _data_dir_option(),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Report totals when no subcommand or path is given."""
    ctx.obj = CliState(
        interval=interval,
        clock_start=clock_start,
        verbose=verbose,
        data_dir=data_dir,
    )
    if ctx.invoked_subcommand is None:
        _run_status(ctx.obj)


@app.command(help=Messages.HELP_STATUS)
def status(
    ctx: typer.Context,
    interval: str | None = _interval_option(),
    clock_start: str | None = _clock_start_option(),
    verbose: bool = _verbose_option(),
    data_dir: Path | None = _data_dir_option(),
) -> None:
    """Report words added and removed across every tracked file."""
    _run_status(_merged_state(ctx, interval, clock_start, verbose, data_dir))


@app.command()
def track(
    ctx: typer.Context,
    paths: list[str] = typer.Argument(
        ...,
        help=Messages.HELP_TRACK_PATHS,
    ),
    interval: str | None = _interval_option(),
    clock_start: str | None = _clock_start_option(),
    verbose: bool = _verbose_option(),
    data_dir: Path | None = _data_dir_option(),
) -> None:
    """Start tracking file(s); report progress if already tracked."""
    state = _merged_state(ctx, interval, clock_start, verbose, data_dir)
    tracker = _build_tracker(state)
    try:
        summary = tracker.track(paths, state.options)
    except PathResolutionError as exc:
        raise typer.BadParameter(str(exc)) from exc
    except TrackerError as exc:
        _report_fatal(exc, _print_track_summary)
        raise typer.Exit(code=1)
    _print_track_summary(summary)
    if state.verbose:
        _print_details(tracker, summary)


@app.command(help=Messages.HELP_CLEAR)
def clear(
    ctx: typer.Context,
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help=Messages.HELP_CLEAR_YES,
    ),
) -> None:
    """Clear the tracking index and file cache."""
    tracker = _build_tracker(_state(ctx))
    confirmed = yes or typer.confirm(Messages.INFO_CLEAR_PROMPT, default=False)
    if not confirmed:
        console.print(_styled(Messages.INFO_CLEAR_ABORTED, Styles.INFO))
        return
    try:
        removed = tracker.clear(confirm=True)
    except TrackerError as exc:
        console.print(_styled(escape(str(exc)), Styles.ERROR), soft_wrap=True)
        raise typer.Exit(code=1)
    message = Messages.INFO_CLEARED if removed else Messages.INFO_CLEAR_NONE
    style = Styles.SUCCESS if removed else Styles.INFO
    console.print(
        _styled(message.format(path=escape(str(tracker.data_dir))), style),
        soft_wrap=True,
    )


def _run_status(state: CliState) -> None:
    tracker = _build_tracker(state)
    try:
        summary = tracker.update(state.options)
    except TrackerError as exc:
        _report_fatal(exc, _print_status_summary)
        raise typer.Exit(code=1)
    _print_status_summary(summary)
    if state.verbose:
        _print_details(tracker, summary)


def _report_fatal(exc: TrackerError, printer) -> None:
    console.print(_styled(escape(str(exc)), Styles.ERROR), soft_wrap=True)
    if exc.partial is not None:
        printer(exc.partial)


def _print_issues(summary: TrackingSummary) -> None:
    for issue in summary.issues:
        console.print(_styled(escape(str(issue)), Styles.WARNING), soft_wrap=True)


def _print_status_summary(summary: TrackingSummary) -> None:
    _print_issues(summary)
    if summary.file_count < 1:
        console.print(Messages.INFO_NO_FILES, soft_wrap=True)
        return
    console.print(
        Messages.INFO_TOTALS.format(
            added=summary.added,
            removed=summary.removed,
            count=summary.file_count,
            plural=plural_suffix(summary.file_count),
            net=summary.net,
        ),
        soft_wrap=True,
    )


def _print_track_summary(summary: TrackingSummary) -> None:
    _print_issues(summary)
    newly = summary.newly_tracked
    if newly:
        console.print(
            _styled(
                Messages.INFO_BEGAN_TRACKING.format(
                    count=len(newly), plural=plural_suffix(len(newly))
                ),
                Styles.SUCCESS,
            )
        )
        for path in newly:
            console.print(escape(str(path)), highlight=False, soft_wrap=True)
    if summary.file_count:
        console.print(
            Messages.INFO_TRACK_TOTALS.format(
                added=summary.added,
                removed=summary.removed,
                count=summary.file_count,
                plural=plural_suffix(summary.file_count),
                net=summary.net,
            ),
            soft_wrap=True,
        )


def _print_details(tracker: Tracker, summary: TrackingSummary) -> None:
    index = tracker.show()
    if summary.rotated and summary.window_id:
        console.print(_styled(Messages.INFO_ROTATED.format(window=summary.window_id), Styles.INFO))
    console.print(
        _styled(
            Messages.INFO_CONFIG_SUMMARY.format(
                interval=index.config.interval,
                plural=plural_suffix(index.config.interval),
                clock_start=index.config.clock_start,
                window=index.window_id or Messages.WINDOW_NONE,
                data_dir=escape(str(tracker.data_dir)),
            ),
            Styles.INFO,
        )
    )
    if index.files:
        _render_files(index)


def _render_files(index: TrackingIndex) -> None:
    table = Table(show_header=True, header_style=Styles.TABLE_HEADER)
    table.title = Messages.TABLE_TITLE
    table.add_column(Messages.TABLE_HEADER_INDEX, justify="right")
    table.add_column(Messages.TABLE_HEADER_ADDED, justify="right")
    table.add_column(Messages.TABLE_HEADER_REMOVED, justify="right")
    table.add_column(Messages.TABLE_HEADER_NET, justify="right")
    table.add_column(Messages.TABLE_HEADER_PATH, overflow="fold")
    entries = sorted(index.files.values(), key=lambda entry: entry.path)
    for idx, entry in enumerate(entries, start=1):
        table.add_row(
            str(idx),
            str(entry.added),
            str(entry.removed),
            format_net_change(entry.added - entry.removed, console),
            escape(entry.path),
        )
    console.print(table)


def run(argv: list[str] | None = None) -> None:
    """Entry point wrapper allowing optional argument override."""
    args = list(argv) if argv is not None else sys.argv[1:]
    app(args=args)
