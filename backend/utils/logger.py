"""
SourceWatch Structured Logging Module.

Requires Python 3.11+.
"""

import logging
import sys

import structlog
from structlog.types import Processor

from utils.config import get_settings


def configure_logging() -> None:
    """
    Configure structured logging for the application.

    Call this once at startup. Change events are logged from watchdog's
    observer thread and the debouncer's timer threads, so every entry
    records the thread it came from.
    """
    settings = get_settings()
    level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.CallsiteParameterAdder(
            [structlog.processors.CallsiteParameter.THREAD_NAME]
        ),
        structlog.dev.set_exc_info,
    ]
    if settings.logging.format == "json":
        processors += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # Inotify/FSEvents chatter is not useful at INFO
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
    logging.getLogger("watchdog").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, named after the calling module or class."""
    return structlog.get_logger(name)


class LoggerMixin:
    """
    Gives a class a ``log`` attribute bound to the class name.

    Usage:
        class Session(LoggerMixin):
            def close(self):
                self.log.info("watch_session_closed", path=path)
    """

    @property
    def log(self) -> structlog.stdlib.BoundLogger:
        if not hasattr(self, "_logger"):
            self._logger = get_logger(self.__class__.__name__)
        return self._logger
