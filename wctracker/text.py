"""Centralized user-facing text for wc-tracker."""

from __future__ import annotations

class Styles:
    ERROR = "red"
    WARNING = "yellow"
    SUCCESS = "green"
    INFO = "dim"
    TITLE = "bold cyan"
    TABLE_HEADER = "bold magenta"


class Messages:
    APP_HELP = (
        "wc-tracker - track the words added and removed in text files over a "
        "recurring time window."
    )
    HELP_TRACK_PATHS = "File(s) to start tracking, or to report progress for if already tracked."
    HELP_INTERVAL = "Set the length, in days, of the tracking window."
    HELP_CLOCK_START = "Set what time of day (H or H:MM, 24-hour) the tracking window starts over."
    HELP_VERBOSE = "Show the interval, clock-start, and tracked file list."
    HELP_DATA_DIR = "Directory holding the tracking index and snapshot cache."
    HELP_STATUS = "Report total words added and removed across tracked files."
    HELP_CLEAR = "Clear the tracking index and file cache."
    HELP_CLEAR_YES = "Skip the confirmation prompt."

    ERROR_INTERVAL_INVALID = "interval must be a positive whole number of days (got {value!r})."
    ERROR_CLOCK_START_INVALID = (
        "clock-start must look like H or H:MM on a 24-hour clock (got {value!r})."
    )
    ERROR_OPTION_UNSUPPORTED = "Unsupported option {key!r}; expected one of: {allowed}."
    ERROR_PATHS_EMPTY = "No paths given to track."
    ERROR_NOT_REGULAR_FILE = "Not a regular file: {path}"
    ERROR_NOT_READABLE = "Cannot read {path}: {reason}"
    ERROR_SNAPSHOT_WRITE = "Unable to write snapshot {path}: {reason}"
    ERROR_FILE_MISSING = "Tracked file no longer exists: {path}"
    ERROR_DIFF_EXIT = "git diff exited with status {code} comparing {path}: {stderr}"
    ERROR_DIFF_MISSING = "Unable to run `{command}`; is git installed and on PATH?"
    ERROR_DIFF_FAILED = "Unable to run `{command}`: {reason}"
    ERROR_DIFF_TIMEOUT = "git diff did not finish within {timeout:g}s comparing {path}."
    ERROR_INDEX_READ = "Unable to read tracking index {path}: {reason}"
    ERROR_INDEX_WRITE = "Unable to write tracking index {path}: {reason}"
    ERROR_INDEX_INVALID = "Tracking index {path} is not valid JSON: {reason}"
    ERROR_INDEX_SCHEMA = "Tracking index {path} has an unsupported layout: {reason}"
    ERROR_STORAGE_REMOVE = "Unable to remove {path}: {reason}"
    ERROR_CLEAR_UNCONFIRMED = "Refusing to clear the tracking index without confirmation."
    ERROR_DATA_DIR_NOT_DIR = "Path is not a directory: {path}"

    INFO_NO_FILES = (
        "No files are being tracked yet. Run `wc-tracker <path>` to start tracking something."
    )
    INFO_TOTALS = (
        "{added} words added and {removed} words removed across {count} tracked "
        "file{plural} (net change {net} words)"
    )
    INFO_TRACK_TOTALS = (
        "{added} words added, {removed} words removed across {count} already tracked "
        "file{plural} (net change {net} words)"
    )
    INFO_BEGAN_TRACKING = "Began tracking {count} file{plural}:"
    INFO_ROTATED = "Started a new tracking window ({window})."
    INFO_CONFIG_SUMMARY = (
        "Interval: {interval} day{plural}\n"
        "Clock start: {clock_start}\n"
        "Current window: {window}\n"
        "Data directory: {data_dir}"
    )
    INFO_CLEAR_PROMPT = "Remove the tracking index and every cached snapshot?"
    INFO_CLEARED = "Cleared tracking data under {path}."
    INFO_CLEAR_NONE = "No tracking data found under {path}."
    INFO_CLEAR_ABORTED = "Nothing was removed."

    TABLE_TITLE = "Tracked files"
    TABLE_HEADER_INDEX = "#"
    TABLE_HEADER_ADDED = "Added"
    TABLE_HEADER_REMOVED = "Removed"
    TABLE_HEADER_NET = "Net"
    TABLE_HEADER_PATH = "File path"
    WINDOW_NONE = "none"
