"""structlog setup for applications embedding mimeregistry.

The library itself only calls ``structlog.get_logger()``; nothing is
configured on import. Entry points (the CLI) call ``configure_logging``.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from mimeregistry.config import LoggingSettings


def configure_logging(settings: LoggingSettings) -> None:
    """Send log events to stderr at ``settings.level`` as JSON or text."""
    processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if settings.format == "json":
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelNamesMapping()[settings.level]
        ),
        # stdout carries command output; logs never mix into it
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )
