"""Shared utilities for claude-activity."""

from .datetime_utils import (
    format_duration_compact,
    format_duration_long,
    format_duration_short,
    parse_iso,
)
from .jsonl_parser import read_log_text, split_lines


# Lazy import for DirectoryWatcher to avoid watchdog dependency at import time
def __getattr__(name):
    if name == "DirectoryWatcher":
        from .file_watcher import DirectoryWatcher
        return DirectoryWatcher
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = [
    "DirectoryWatcher",
    "format_duration_compact",
    "format_duration_long",
    "format_duration_short",
    "parse_iso",
    "read_log_text",
    "split_lines",
]
