"""
SourceWatch Change Filter.

Decides whether a changed path is a real source change.
Requires Python 3.11+.
"""

import fnmatch
import os
from collections.abc import Callable, Iterable
from pathlib import Path, PurePath

from utils.logger import LoggerMixin

Predicate = Callable[[str], bool]
Notifier = Callable[[str], None]


def watch_everything(file_path: str) -> bool:
    """Default predicate: every path is worth watching."""
    return True


def normalize_path(path: str | os.PathLike[str]) -> str:
    """Make a path absolute and collapse separators and dot segments."""
    return os.path.normpath(os.path.abspath(os.fspath(path)))


def is_under_dir(file_path: str | os.PathLike[str], directory: str | os.PathLike[str]) -> bool:
    """
    Check whether a path is a directory or lies anywhere beneath it.

    Matching is done per path segment, so ``/a/artifacts-old`` is not
    under ``/a/artifacts``.
    """
    return PurePath(normalize_path(file_path)).is_relative_to(normalize_path(directory))


class ChangeFilter(LoggerMixin):
    """
    Filters raw change notifications before they reach the callback.

    Paths inside the artifacts directory are always dropped, then the
    caller's predicate gets a say. Surviving paths are handed to the
    change callback. Exceptions from the predicate or the callback
    propagate to the caller.
    """

    def __init__(
        self,
        artifacts_dir: str | os.PathLike[str],
        on_change: Notifier,
        should_watch_file: Predicate = watch_everything,
    ) -> None:
        """
        Initialize the filter.

        Args:
            artifacts_dir: Directory holding build output
            on_change: Called with the path of every accepted change
            should_watch_file: Extra predicate applied to non-artifact paths
        """
        self._artifacts_dir = normalize_path(artifacts_dir)
        self._on_change = on_change
        self._should_watch_file = should_watch_file

    @property
    def artifacts_dir(self) -> str:
        return self._artifacts_dir

    def decide(self, file_path: str) -> bool:
        """
        Apply the filtering rules to one changed path.

        Args:
            file_path: Absolute path of the changed file

        Returns:
            True if the change was accepted and the callback invoked
        """
        if is_under_dir(file_path, self._artifacts_dir):
            self.log.debug("change_ignored", path=file_path, reason="artifact")
            return False

        if not self._should_watch_file(file_path):
            self.log.debug("change_ignored", path=file_path, reason="filtered")
            return False

        self.log.debug("change_detected", path=file_path)
        self._on_change(file_path)
        return True


def proxy_file_changes(
    file_path: str,
    artifacts_dir: str | os.PathLike[str],
    on_change: Notifier,
    should_watch_file: Predicate = watch_everything,
) -> bool:
    """
    Forward a single change to ``on_change`` unless it should be ignored.

    Args:
        file_path: Absolute path of the changed file
        artifacts_dir: Directory whose contents never count as changes
        on_change: Callback receiving the changed path
        should_watch_file: Predicate rejecting paths the caller ignores

    Returns:
        True if the change was passed on
    """
    change_filter = ChangeFilter(
        artifacts_dir=artifacts_dir,
        on_change=on_change,
        should_watch_file=should_watch_file,
    )
    return change_filter.decide(file_path)


def ignore_patterns_filter(
    patterns: Iterable[str],
    root: str | os.PathLike[str] | None = None,
) -> Predicate:
    """
    Build a predicate that rejects paths matching any glob pattern.

    A pattern matches when it matches the whole path or any single
    segment of it. With ``root`` given, only segments below the root
    are considered, so a dot-directory above the project does not
    hide everything in it.

    Args:
        patterns: Glob patterns such as ``*.zip`` or ``node_modules``
        root: Directory the segments are taken relative to

    Returns:
        Predicate returning False for ignored paths
    """
    patterns = list(patterns)
    root_path = Path(normalize_path(root)) if root is not None else None

    def should_watch_file(file_path: str) -> bool:
        path = Path(normalize_path(file_path))
        if root_path is not None and path.is_relative_to(root_path):
            parts = path.relative_to(root_path).parts
        else:
            parts = path.parts[1:]

        for pattern in patterns:
            if fnmatch.fnmatch(str(path), pattern):
                return False
            if any(fnmatch.fnmatch(part, pattern) for part in parts):
                return False
        return True

    return should_watch_file
