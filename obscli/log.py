"""Logging setup for the command-line entry point."""

import sys

from loguru import logger


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Route loguru output to stderr at the requested level.

    ``-v`` enables DEBUG (canonical strings, per-part progress);
    ``-q`` shows warnings and errors only.
    """
    if verbose:
        level = "DEBUG"
    elif quiet:
        level = "WARNING"
    else:
        level = "INFO"

    logger.remove()
    logger.add(sys.stderr, level=level, format="<level>{level: <8}</level> {message}")
