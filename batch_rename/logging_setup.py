"""Logging configuration."""

import logging

from rich.console import Console
from rich.logging import RichHandler


LOGGER_NAME = "batch_rename"


def setup_logging(verbosity: int = 0) -> None:
    """Send the package's log records to stderr through a RichHandler.

    Args:
        verbosity: 0 shows warnings and errors, 1 adds info, 2 or more adds debug.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicate messages
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    logger.propagate = False
