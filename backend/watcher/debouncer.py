"""
SourceWatch Debouncer.

Collapses bursts of change notifications into one.
Requires Python 3.11+.
"""

import threading
import time
from dataclasses import dataclass

from utils.logger import LoggerMixin
from watcher.change_filter import Notifier


@dataclass
class PendingChange:
    """The latest change of a burst, waiting to be reported."""

    path: str
    timestamp: float


class Debouncer(LoggerMixin):
    """
    Debounces rapid change notifications.

    A Debouncer is itself a change callback: wrap the real callback in
    one and pass it as ``on_change``. Editors typically produce several
    events per save, and a rebuild per event is wasted work.

    By default the callback fires once, with the most recent path,
    after ``delay_ms`` without new changes. With ``execute_immediately``
    the first change of a burst fires right away and the rest of the
    burst is swallowed. Callback failures on either edge are logged and
    dropped; only ``flush()`` raises them.
    """

    def __init__(
        self,
        callback: Notifier,
        delay_ms: int = 1000,
        execute_immediately: bool = False,
    ) -> None:
        """
        Initialize the debouncer.

        Args:
            callback: Function to call with the changed path
            delay_ms: Quiet period in milliseconds that ends a burst
            execute_immediately: Fire on the leading edge of a burst
        """
        self._callback = callback
        self._delay = delay_ms / 1000.0
        self._execute_immediately = execute_immediately
        self._pending: PendingChange | None = None
        self._paths: set[str] = set()
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()

    def __call__(self, path: str) -> None:
        """
        Record a change and restart the quiet timer.

        Args:
            path: Path of the changed file
        """
        with self._lock:
            in_burst = self._timer is not None
            if self._timer is not None:
                self._timer.cancel()

            fire_now = self._execute_immediately and not in_burst
            if not self._execute_immediately:
                self._pending = PendingChange(path=path, timestamp=time.time())
            self._paths.add(path)

            self._timer = threading.Timer(self._delay, self._process_pending)
            self._timer.daemon = True
            self._timer.start()

        if fire_now:
            self.log.debug("debounce_leading_edge", path=path)
            self._report(path)

    def _process_pending(self) -> None:
        """Fire for the burst that just went quiet."""
        with self._lock:
            self._timer = None
            pending = self._take_pending()

        if pending is None:
            return

        self.log.debug("processing_debounced_change", path=pending.path)
        self._report(pending.path)

    def _report(self, path: str) -> None:
        """Call the callback; its failures are logged, not raised."""
        try:
            self._callback(path)
        except Exception as e:
            self.log.error("debounce_callback_failed", path=path, error=str(e))

    def _take_pending(self) -> PendingChange | None:
        pending = self._pending
        self._pending = None
        self._paths.clear()
        return pending

    def flush(self) -> str | None:
        """
        Immediately report any pending change.

        Returns:
            The path that was reported, if any
        """
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            pending = self._take_pending()

        if pending is None:
            return None

        self._callback(pending.path)
        return pending.path

    def cancel(self) -> None:
        """Drop any pending change without reporting it."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._take_pending()

    @property
    def pending_count(self) -> int:
        """Get number of distinct paths changed in the current burst."""
        return len(self._paths)

    @property
    def pending_paths(self) -> list[str]:
        """Get the distinct paths changed in the current burst."""
        return sorted(self._paths)
