"""Logging configuration for the piperef command line."""

import logging
import sys
from enum import IntEnum
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler


class LogLevel(IntEnum):
    """Log level enumeration."""

    QUIET = logging.WARNING
    NORMAL = logging.INFO
    VERBOSE = logging.DEBUG


def configure_logging(
    verbosity: int = 0,
    quiet: bool = False,
    no_color: bool = False,
    stream: TextIO = sys.stderr,
) -> Console:
    """Configure logging for the command line.

    Params:
        verbosity: Number of -v flags (0=normal, 1+=debug with timestamps)
        quiet: Only report warnings and errors; wins over verbosity
        no_color: Disable colored output
        stream: Stream log records are written to

    Returns:
        Console used for log output
    """
    if quiet:
        level = LogLevel.QUIET
    elif verbosity >= 1:
        level = LogLevel.VERBOSE
    else:
        level = LogLevel.NORMAL

    console = Console(file=stream, no_color=no_color, highlight=not no_color)
    handler = RichHandler(
        console=console,
        show_time=verbosity >= 1,
        show_path=verbosity >= 2,
    )

    logger = logging.getLogger("piperef")
    logger.handlers[:] = [handler]
    logger.setLevel(level)
    logger.propagate = False
    return console
