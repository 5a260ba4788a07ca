"""
SourceWatch Watcher Package.

Source tree change detection for rebuild-on-change tooling.
Requires Python 3.11+.
"""

from watcher.change_filter import ChangeFilter, ignore_patterns_filter, proxy_file_changes
from watcher.debouncer import Debouncer
from watcher.errors import CallbackError, SourceWatchError, WatchSetupError
from watcher.file_watcher import (
    RawEvent,
    SessionState,
    WatchConfig,
    WatchSession,
    on_source_change,
)

__all__ = [
    "ChangeFilter",
    "ignore_patterns_filter",
    "proxy_file_changes",
    "Debouncer",
    "CallbackError",
    "SourceWatchError",
    "WatchSetupError",
    "RawEvent",
    "SessionState",
    "WatchConfig",
    "WatchSession",
    "on_source_change",
]
