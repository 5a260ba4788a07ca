"""
SourceWatch Test Configuration.

Pytest fixtures and configuration.
Requires Python 3.11+.
"""

import threading
from collections.abc import Callable
from pathlib import Path
from typing import Generator
from unittest.mock import Mock

import pytest

from utils.temp_dir import temp_dir
from watcher.file_watcher import RawEvent


class FakeSubscription:
    """Subscription handle produced by FakeSubscriber."""

    def __init__(self, root: Path, on_event: Callable[[RawEvent], None]) -> None:
        self.root = root
        self.on_event = on_event
        self.close_calls = 0
        self.close_error: OSError | None = None

    def emit(self, path: str) -> None:
        """Deliver a synthetic raw event, as the OS would."""
        self.on_event(RawEvent(path=path))

    def close(self) -> None:
        self.close_calls += 1
        if self.close_error is not None:
            raise self.close_error


class FakeSubscriber:
    """Deterministic stand-in for the watchdog subscriber."""

    def __init__(self) -> None:
        self.subscriptions: list[FakeSubscription] = []
        self.error: OSError | None = None

    def __call__(self, root: Path, on_event: Callable[[RawEvent], None]) -> FakeSubscription:
        if self.error is not None:
            raise self.error
        subscription = FakeSubscription(root, on_event)
        self.subscriptions.append(subscription)
        return subscription

    @property
    def last(self) -> FakeSubscription:
        return self.subscriptions[-1]


@pytest.fixture
def fake_subscriber() -> FakeSubscriber:
    """Create a fake subscriber for sessions that should not touch the OS."""
    return FakeSubscriber()


@pytest.fixture
def source_tree() -> Generator[Path, None, None]:
    """Create a scratch source directory with one file in it."""
    with temp_dir() as path:
        (path / "foo.txt").write_text("<contents>")
        yield path


@pytest.fixture
def change_spy() -> Mock:
    """
    Create a change callback that records calls.

    ``change_spy.changed`` is set on the first call, so tests can wait
    for it with a timeout instead of sleeping.
    """
    changed = threading.Event()
    spy = Mock(side_effect=lambda path: changed.set())
    spy.changed = changed
    return spy
