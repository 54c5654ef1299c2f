"""
Logging Configuration

Centralized logging configuration for the tracker.
Library modules only create loggers; applications embedding the tracker call
configure_logging() once at start-up.

Usage:
    from orbit_tracker.logging_config import configure_logging, get_logger

    configure_logging()
    logger = get_logger(__name__)
    logger.info("Constellation propagated")
    logger.warning("Propagation failed for object 25544")
"""

import logging
import sys
from typing import Optional, Union

from orbit_tracker.config import config

# Default logging format
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(
    level: Union[int, str, None] = None, log_file: Optional[str] = None
) -> None:
    """
    Configure logging for the entire application.

    Parameters
    ----------
    level : int or str, optional
        Logging level (e.g., logging.DEBUG or "DEBUG"). Defaults to
        ORBIT_TRACKER_LOG_LEVEL.
    log_file : str, optional
        Path to log file. Defaults to ORBIT_TRACKER_LOG_FILE; if neither is
        set, logs only to console.
    """
    if level is None:
        level = config.LOG_LEVEL
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    if log_file is None:
        log_file = config.LOG_FILE

    handlers = [logging.StreamHandler(sys.stdout)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers,
        force=True,
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Parameters
    ----------
    name : str
        Name of the logger (typically __name__)

    Returns
    -------
    logging.Logger
        Logger instance
    """
    return logging.getLogger(name)
