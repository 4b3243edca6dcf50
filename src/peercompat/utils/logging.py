"""Logging setup for peercompat.

Log records go to stderr through rich so that CSV/JSON written to stdout
stays machine-readable.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

QUIET_LOGGERS = ("httpx", "httpcore")
FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_console_handler: Optional[RichHandler] = None


def level_for(verbose: bool = False, quiet: bool = False) -> str:
    """Map the global CLI flags to a log level name."""
    if verbose:
        return "DEBUG"
    if quiet:
        return "WARNING"
    return "INFO"


def configure_logging(level: str = "INFO", console: Optional[Console] = None) -> None:
    """Install the stderr handler on the root logger.

    The handler is installed once; later calls only change the level.

    Args:
        level: Log level name for console output.
        console: Console to log to (defaults to stderr).
    """
    global _console_handler

    root_logger = logging.getLogger()
    if _console_handler is None:
        _console_handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
            markup=False,
        )
        _console_handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(_console_handler)

    _console_handler.setLevel(level.upper())
    root_logger.setLevel(level.upper())

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_to_file(filepath: str, level: str = "DEBUG") -> logging.FileHandler:
    """Also write log records to a file.

    The root logger is lowered to ``level`` if needed; the console handler
    keeps its own level.

    Args:
        filepath: Path to the log file.
        level: Log level for the file.

    Returns:
        The installed handler.
    """
    handler = logging.FileHandler(filepath, encoding="utf-8")
    handler.setLevel(level.upper())
    handler.setFormatter(logging.Formatter(FILE_FORMAT))

    root_logger = logging.getLogger()
    file_level = logging.getLevelName(level.upper())
    if root_logger.level > file_level:
        root_logger.setLevel(file_level)
    root_logger.addHandler(handler)
    return handler
