"""
SourceWatch Watcher Errors.

Requires Python 3.11+.
"""

from pathlib import Path


class SourceWatchError(Exception):
    """Base class for watcher errors."""


class WatchSetupError(SourceWatchError):
    """The target directory could not be subscribed to."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Cannot watch {path}: {reason}")
        self.path = path
        self.reason = reason


class CallbackError(SourceWatchError):
    """A caller-supplied predicate or change callback raised during dispatch."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Change callback failed for {path}")
        self.path = path
