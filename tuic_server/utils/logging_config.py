"""Logging configuration for tuic-server.

Console output goes through a Rich handler; levels come from the resolved
:class:`~tuic_server.models.LogLevel`.
"""

from __future__ import annotations

import logging
import logging.config
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

from tuic_server.models import TRACE, LogLevel

ROOT_LOGGER_NAME = "tuic_server"


def create_rich_handler(
    level: int = logging.NOTSET, console: Console | None = None
) -> RichHandler:
    """Create a RichHandler writing to stderr."""
    return RichHandler(
        level=level,
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )


def setup_logging(level: LogLevel, console: Console | None = None) -> None:
    """Set up logging for the process at the given verbosity.

    ``LogLevel.OFF`` leaves the handlers installed but filters every record.
    """
    logging.addLevelName(TRACE, "TRACE")
    numeric_level = level.to_logging_level()

    logging_config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "rich": {
                "format": "%(name)s: %(message)s",
                "datefmt": "[%X]",
            },
        },
        "handlers": {
            "console": {
                "()": create_rich_handler,
                "level": numeric_level,
                "console": console,
                "formatter": "rich",
            },
        },
        "loggers": {
            ROOT_LOGGER_NAME: {
                "level": numeric_level,
                "handlers": ["console"],
                "propagate": False,
            },
        },
        "root": {
            "level": numeric_level,
            "handlers": ["console"],
        },
    }

    logging.config.dictConfig(logging_config)


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the tuic_server namespace."""
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")

