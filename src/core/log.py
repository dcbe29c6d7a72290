"""Logging configuration for jobwala-admin."""

from __future__ import annotations

import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "jobwala"


def setup_logging(level: str = "WARNING", *, rich_output: bool = True) -> logging.Logger:
    """Configure the `jobwala` logger.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR).
        rich_output: Render through Rich on stderr; plain formatter otherwise
            (pipelines, CI logs).

    Returns:
        The configured root logger of the application.
    """

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    logger.handlers.clear()
    logger.propagate = False

    if rich_output:
        handler: logging.Handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
    logger.addHandler(handler)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Child logger, prefixed with `jobwala.`."""

    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
