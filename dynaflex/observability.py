"""Event sinks and logging setup.

Library code never logs through a process-wide logger directly. The retry
executor and the client receive an EventSink and report what they do to it;
the default sink forwards events to structlog.
"""

import logging
import sys
from typing import Any, Protocol

import structlog

LOGGER_NAME = "dynaflex"


class EventSink(Protocol):
    def __call__(self, event: str, /, **fields: Any) -> None: ...


class StructlogSink:
    """Forward events to a structlog logger at a fixed level.

    Example:
        sink = StructlogSink(level="debug")
        sink("item_put", table_name="products")

    """

    def __init__(self, logger: Any | None = None, *, level: str = "info") -> None:
        self._logger = logger if logger is not None else structlog.get_logger(LOGGER_NAME)
        self._level = level

    def __call__(self, event: str, /, **fields: Any) -> None:
        getattr(self._logger, self._level)(event, **fields)


def null_sink(event: str, /, **fields: Any) -> None:
    """Discard every event."""


_CONFIGURED = False


def configure_logging(*, level: str | int = "INFO") -> None:
    """Configure structlog to render events to stderr.

    Only the command line entrypoint calls this. Calling it again is a no-op.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
    _CONFIGURED = True


__all__ = [
    "EventSink",
    "StructlogSink",
    "configure_logging",
    "null_sink",
]
