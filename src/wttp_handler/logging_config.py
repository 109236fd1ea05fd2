import logging
import sys
from pathlib import Path
from typing import IO, Optional, Union

from .models.config import WttpConfig

LOGGER_NAME = "wttp_handler"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _attach(logger: logging.Logger, handler: logging.Handler, level: int, formatter: logging.Formatter) -> None:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def setup_logging(
    level: Union[str, int] = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    format_string: Optional[str] = None,
    force: bool = False,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """
    Set up logging for wttp-handler.

    Records go to stderr by default so that fetched content written to stdout
    stays clean.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL) or number
        log_file: Optional file path for logging output
        format_string: Optional custom format string for log messages
        force: If True, replace handlers installed by an earlier call
        stream: Console stream (defaults to sys.stderr)

    Returns:
        The ``wttp_handler`` logger
    """
    numeric_level = level if isinstance(level, int) else getattr(logging, level.upper(), logging.INFO)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)
    logger.propagate = False

    if logger.handlers and not force:
        return logger

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)
    _attach(logger, logging.StreamHandler(stream or sys.stderr), numeric_level, formatter)
    if log_file:
        _attach(logger, logging.FileHandler(log_file), numeric_level, formatter)

    return logger


def setup_logging_from_config(config: WttpConfig, force: bool = False) -> logging.Logger:
    """Set up logging from the ``log_level`` and ``log_file`` settings of a config."""
    return setup_logging(level=config.log_level, log_file=config.log_file, force=force)
