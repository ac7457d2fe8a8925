"""
Logging configuration for local-lambda.

Records of the ``local_lambda`` package go to a rich console handler on
stderr. Stdout is left to the function output of ``sam local invoke``.
Other libraries' loggers and the root logger are not touched.
"""

import logging
import os
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

from .constants import NAMESPACE


NOISY_LOGGERS = ("asyncio",)
"""Loggers capped at INFO when local-lambda runs at DEBUG."""


def get_log_level(level: Optional[Union[int, str]] = None) -> int:
    """Resolve a level number or name, falling back to LOG_LEVEL and then INFO."""
    if level is None:
        level = os.environ.get("LOG_LEVEL", "INFO")
    if isinstance(level, int):
        return level

    resolved = getattr(logging, level.strip().upper(), None)
    return resolved if isinstance(resolved, int) else logging.INFO


def get_log_format(level: int) -> str:
    """Message format; rich renders time and level itself."""
    if level <= logging.DEBUG:
        return "%(name)s | %(message)s"
    return "%(message)s"


def setup_logging(
    level: Optional[Union[int, str]] = None,
    console: Optional[Console] = None,
) -> RichHandler:
    """
    Attach a rich console handler to the local_lambda logger.

    Calling it again replaces the handler installed by the previous call, so
    the CLI's --log-level can reconfigure logging.

    Args:
        level: Log level (defaults to LOG_LEVEL env var or INFO)
        console: Console to write to (stderr if None)

    Returns:
        The installed handler
    """
    level = get_log_level(level)
    debug = level <= logging.DEBUG

    package_logger = logging.getLogger(NAMESPACE)
    package_logger.setLevel(level)
    for existing in list(package_logger.handlers):
        if isinstance(existing, RichHandler):
            package_logger.removeHandler(existing)

    handler = RichHandler(
        console=console or Console(stderr=True),
        level=level,
        show_path=debug,
        rich_tracebacks=debug,
        markup=False,
    )
    handler.setFormatter(logging.Formatter(get_log_format(level)))
    package_logger.addHandler(handler)

    if debug:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.INFO)

    return handler
