"""
SourceWatch File Watcher.

Watch sessions over a source tree using watchdog.
Requires Python 3.11+.
"""

import os
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from watchdog.observers import Observer
from watchdog.events import (
    FileSystemEvent,
    FileSystemEventHandler,
    FileSystemMovedEvent,
)

from utils.config import get_settings
from utils.logger import LoggerMixin
from watcher.change_filter import (
    ChangeFilter,
    Notifier,
    Predicate,
    normalize_path,
    watch_everything,
)
from watcher.errors import CallbackError, WatchSetupError


class ChangeType(str, Enum):
    """Kinds of filesystem changes reported as raw events."""

    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"
    MOVED = "moved"


@dataclass(frozen=True)
class RawEvent:
    """A single "something changed here" notification."""

    path: str
    change_type: ChangeType = ChangeType.MODIFIED


class SessionState(str, Enum):
    """Lifecycle of a watch session."""

    CREATED = "created"
    WATCHING = "watching"
    CLOSED = "closed"


class Subscription(Protocol):
    """Handle on an armed directory subscription."""

    def close(self) -> None: ...


# subscribe(root, on_event) -> Subscription; must only return once armed
Subscriber = Callable[[Path, Callable[[RawEvent], None]], Subscription]


@dataclass(frozen=True)
class WatchConfig:
    """
    Everything a watch session needs.

    Attributes:
        source_dir: Root of the source tree
        artifacts_dir: Build output directory, never reported
        on_change: Called with the path of each accepted change
        should_watch_file: Predicate for paths outside the artifacts dir
        watch_dir: Subscribe to this directory instead of source_dir
    """

    source_dir: Path
    artifacts_dir: Path
    on_change: Notifier
    should_watch_file: Predicate = watch_everything
    watch_dir: Path | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "source_dir", Path(normalize_path(self.source_dir)))
        object.__setattr__(self, "artifacts_dir", Path(normalize_path(self.artifacts_dir)))
        if self.watch_dir is not None:
            object.__setattr__(self, "watch_dir", Path(normalize_path(self.watch_dir)))

    @property
    def target_dir(self) -> Path:
        """Directory the session subscribes to."""
        return self.watch_dir if self.watch_dir is not None else self.source_dir


class RawEventHandler(FileSystemEventHandler):
    """Turns watchdog file events into raw events. Directory events are dropped."""

    def __init__(self, on_event: Callable[[RawEvent], None]) -> None:
        super().__init__()
        self._on_event = on_event

    def _emit(self, path: str | bytes, change_type: ChangeType) -> None:
        self._on_event(RawEvent(path=os.fsdecode(path), change_type=change_type))

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._emit(event.src_path, ChangeType.CREATED)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._emit(event.src_path, ChangeType.MODIFIED)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._emit(event.src_path, ChangeType.DELETED)

    def on_moved(self, event: FileSystemMovedEvent) -> None:
        if event.is_directory:
            return
        self._emit(event.src_path, ChangeType.MOVED)
        self._emit(event.dest_path, ChangeType.MOVED)


class ObserverSubscription(LoggerMixin):
    """
    A watchdog observer scheduled on one directory.

    The observer's emitters register their OS watches inside
    ``Observer.start()``, so the subscription is armed once the
    constructor returns.
    """

    def __init__(
        self,
        root: Path,
        on_event: Callable[[RawEvent], None],
        recursive: bool = True,
        stop_timeout: float = 5.0,
    ) -> None:
        self._root = root
        self._stop_timeout = stop_timeout
        self._observer = Observer()
        self._observer.schedule(
            RawEventHandler(on_event),
            str(root),
            recursive=recursive,
        )
        self._observer.start()

        self.log.debug("observer_started", path=str(root), recursive=recursive)

    def close(self) -> None:
        """Stop the observer, waiting for its thread unless called from it."""
        self._observer.stop()
        # Closing from inside a callback runs on the observer thread itself
        if threading.current_thread() is not self._observer:
            self._observer.join(timeout=self._stop_timeout)
        self.log.debug("observer_stopped", path=str(self._root))


def watchdog_subscriber(root: Path, on_event: Callable[[RawEvent], None]) -> ObserverSubscription:
    """Default subscriber backed by the platform's watchdog observer."""
    settings = get_settings()
    return ObserverSubscription(
        root,
        on_event,
        recursive=settings.watcher.recursive,
        stop_timeout=settings.watcher.stop_timeout_seconds,
    )


class WatchSession(LoggerMixin):
    """
    Watches a directory and reports relevant changes.

    Every raw event received while watching is resolved to an absolute
    path and run through a ChangeFilter. Closing is idempotent and may
    happen from any thread, including from inside the change callback.
    """

    def __init__(
        self,
        config: WatchConfig,
        subscriber: Subscriber | None = None,
    ) -> None:
        """
        Initialize the session without subscribing yet.

        Args:
            config: Directories and callbacks for this session
            subscriber: Source of raw events (defaults to watchdog)
        """
        self._config = config
        self._subscriber = subscriber or watchdog_subscriber
        self._filter = ChangeFilter(
            artifacts_dir=config.artifacts_dir,
            on_change=config.on_change,
            should_watch_file=config.should_watch_file,
        )
        self._subscription: Subscription | None = None
        self._state = SessionState.CREATED
        self._lock = threading.Lock()

    def open(self) -> "WatchSession":
        """
        Subscribe to the target directory.

        Returns only once the subscription is armed. Calling it on a
        session that was already opened does nothing.

        Raises:
            WatchSetupError: If the target directory cannot be watched
        """
        target = self._config.target_dir

        with self._lock:
            if self._state is not SessionState.CREATED:
                return self
            if not target.exists():
                self._state = SessionState.CLOSED
                raise WatchSetupError(target, "directory does not exist")
            if not target.is_dir():
                self._state = SessionState.CLOSED
                raise WatchSetupError(target, "not a directory")
            self._state = SessionState.WATCHING

        try:
            subscription = self._subscriber(target, self._handle_event)
        except OSError as e:
            with self._lock:
                self._state = SessionState.CLOSED
            raise WatchSetupError(target, e.strerror or str(e)) from e

        with self._lock:
            closed_meanwhile = self._state is SessionState.CLOSED
            if not closed_meanwhile:
                self._subscription = subscription

        if closed_meanwhile:
            self._teardown(subscription)
            return self

        self.log.info(
            "watch_session_opened",
            path=str(target),
            source_dir=str(self._config.source_dir),
            artifacts_dir=str(self._config.artifacts_dir),
        )
        return self

    def close(self) -> None:
        """Stop reporting changes and release the subscription."""
        with self._lock:
            if self._state is SessionState.CLOSED:
                return
            self._state = SessionState.CLOSED
            subscription = self._subscription
            self._subscription = None

        if subscription is not None:
            self._teardown(subscription)
        self.log.info("watch_session_closed", path=str(self._config.target_dir))

    def _teardown(self, subscription: Subscription) -> None:
        try:
            subscription.close()
        except OSError as e:
            # The watched tree may already be gone
            self.log.debug(
                "watch_teardown_error",
                path=str(self._config.target_dir),
                error=str(e),
            )

    def _handle_event(self, event: RawEvent) -> None:
        """Route one raw event through the change filter."""
        with self._lock:
            watching = self._state is SessionState.WATCHING
        if not watching:
            return

        path = normalize_path(os.path.join(self._config.target_dir, event.path))
        try:
            self._filter.decide(path)
        except Exception as e:
            self.log.error("change_callback_failed", path=path, error=str(e))
            # The error ends the dispatch thread, so nothing would be reported again
            with self._lock:
                self._state = SessionState.CLOSED
                subscription = self._subscription
                self._subscription = None
            if subscription is not None:
                self._teardown(subscription)
            raise CallbackError(path) from e

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_watching(self) -> bool:
        """Check if the session is currently reporting changes."""
        return self._state is SessionState.WATCHING

    @property
    def config(self) -> WatchConfig:
        return self._config

    def __enter__(self) -> "WatchSession":
        """Context manager entry."""
        return self.open()

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()


def on_source_change(
    config: WatchConfig,
    subscriber: Subscriber | None = None,
) -> WatchSession:
    """
    Start watching a source tree for changes.

    Args:
        config: Directories and callbacks for the session
        subscriber: Source of raw events (defaults to watchdog)

    Returns:
        An open WatchSession; call close() when done

    Raises:
        WatchSetupError: If the target directory cannot be watched
    """
    return WatchSession(config, subscriber).open()
