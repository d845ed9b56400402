"""Logging setup shared by the CLI and the traversal engine."""

from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

SUCCESS = 25
LOGGER_NAME = "notion_mirror"

logging.addLevelName(SUCCESS, "SUCCESS")


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    console: Optional[Console] = None,
) -> logging.Logger:
    """Attach a rich handler to the package logger.

    Only the ``notion_mirror`` namespace is configured so third-party loggers
    (``httpx`` in particular) keep their own levels.
    """

    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def log_success(logger: logging.Logger, message: str, *args: object) -> None:
    logger.log(SUCCESS, message, *args)


def indent(level: int) -> str:
    return "  " * level
