"""Structured logging for minivcs using structlog.

Everything is routed through the stdlib ``minivcs`` logger and rendered on
stderr, so stdout carries only command output.
"""

import logging
import os
import sys

import structlog
from structlog.types import FilteringBoundLogger

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

# Applied both to structlog events and to plain stdlib records
_SHARED_PROCESSORS = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
]


class _StderrHandler(logging.StreamHandler):
    """StreamHandler bound to whatever sys.stderr is at emit time."""

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value):
        pass


def resolve_level(name: str | None, default: int = logging.WARNING) -> int:
    """Map a level name such as "info" to its logging constant."""
    if not name:
        return default
    return _LEVELS.get(name.lower(), default)


def configure_structlog(
    log_format: str | None = None,
    log_colors: bool | None = None,
    log_level: str | None = None,
) -> None:
    """(Re)configure logging; arguments win over MINIVCS_LOG_* variables."""
    log_format = (log_format or os.getenv("MINIVCS_LOG_FORMAT") or "pretty").lower()
    if log_colors is None:
        log_colors = os.getenv("MINIVCS_LOG_COLORS", "true").lower() in (
            "true",
            "1",
            "yes",
            "on",
        )

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=log_colors)

    handler = _StderrHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer, foreign_pre_chain=_SHARED_PROCESSORS
        )
    )
    package_logger = logging.getLogger("minivcs")
    package_logger.handlers = [handler]
    package_logger.setLevel(
        resolve_level(log_level or os.getenv("MINIVCS_LOG_LEVEL"))
    )
    package_logger.propagate = False

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_SHARED_PROCESSORS,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


configure_structlog()


def get_logger(name: str) -> FilteringBoundLogger:
    """Get a structlog logger under the minivcs namespace."""
    if not name.startswith("minivcs"):
        name = f"minivcs.{name}"
    return structlog.get_logger(name)
