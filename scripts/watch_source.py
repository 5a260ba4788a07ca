#!/usr/bin/env python3
"""
SourceWatch Command-Line Watcher.

Watches a source tree and runs a command whenever a source file changes.
Requires Python 3.11+.

Usage:
    python scripts/watch_source.py /path/to/extension --exec "make build"
"""

import argparse
import shlex
import signal
import subprocess
import sys
import threading
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from utils.config import get_settings
from utils.logger import configure_logging, get_logger
from watcher.change_filter import ignore_patterns_filter
from watcher.debouncer import Debouncer
from watcher.errors import WatchSetupError
from watcher.file_watcher import WatchConfig, on_source_change


configure_logging()
logger = get_logger("watch_source")


def build_config(args: argparse.Namespace, on_change) -> WatchConfig:
    """Translate command-line arguments into a WatchConfig."""
    settings = get_settings()
    source_dir = args.source_dir.resolve()

    artifacts_dir = args.artifacts_dir
    if artifacts_dir is None:
        artifacts_dir = source_dir / settings.watcher.artifacts_dir_name

    ignore_patterns = [*settings.watcher.ignore_patterns, *args.ignore]

    return WatchConfig(
        source_dir=source_dir,
        watch_dir=args.watch_dir.resolve() if args.watch_dir else None,
        artifacts_dir=artifacts_dir.resolve(),
        on_change=on_change,
        should_watch_file=ignore_patterns_filter(ignore_patterns, root=source_dir),
    )


def make_runner(command: str | None):
    """Build the change callback: run the command, or just log."""

    def on_change(path: str) -> None:
        logger.info("source_changed", path=path)
        if command is None:
            return
        try:
            result = subprocess.run(shlex.split(command), check=False)
        except OSError as e:
            logger.error("command_failed", command=command, error=str(e))
            return
        if result.returncode != 0:
            logger.warning("command_failed", command=command, returncode=result.returncode)
        else:
            logger.info("command_completed", command=command)

    return on_change


def main() -> None:
    """Main entry point."""
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Watch a source tree and react to file changes"
    )
    parser.add_argument(
        "source_dir",
        type=Path,
        help="Root of the source tree",
    )
    parser.add_argument(
        "--watch-dir",
        type=Path,
        default=None,
        help="Watch this directory instead of the source dir",
    )
    parser.add_argument(
        "--artifacts-dir",
        type=Path,
        default=None,
        help=f"Build output directory to ignore (default: <source_dir>/{settings.watcher.artifacts_dir_name})",
    )
    parser.add_argument(
        "--ignore",
        action="append",
        default=[],
        help="Glob pattern to ignore; may be repeated",
    )
    parser.add_argument(
        "--debounce-ms",
        type=int,
        default=settings.watcher.debounce_delay_ms,
        help="Quiet period before reacting to a burst of changes (default: %(default)s)",
    )
    parser.add_argument(
        "--exec",
        dest="command",
        default=None,
        help="Command to run after each change",
    )
    args = parser.parse_args()

    on_change = Debouncer(
        make_runner(args.command),
        delay_ms=args.debounce_ms,
        execute_immediately=settings.watcher.execute_immediately,
    )
    config = build_config(args, on_change)

    try:
        session = on_source_change(config)
    except WatchSetupError as e:
        logger.error("watch_setup_failed", path=str(e.path), reason=e.reason)
        sys.exit(2)

    stop = threading.Event()

    def handle_signal(signum, frame) -> None:
        logger.info("stopping", signal=signal.Signals(signum).name)
        stop.set()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        stop.wait()
    finally:
        session.close()
        on_change.cancel()


if __name__ == "__main__":
    main()
