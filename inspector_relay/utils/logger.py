"""Inspector Relay logging

Every module logs through a child of the ``inspector_relay`` logger; only that
root logger carries handlers, configured once by ``configure_logging``.
"""

import logging
import sys
from typing import Optional

from rich.logging import RichHandler

ROOT_LOGGER = "inspector_relay"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(
    level: Optional[str] = "info",
    log_file: Optional[str] = None,
    enable_rich: Optional[bool] = True,
) -> logging.Logger:
    """Set up the package logger

    Args:
        level: Log level name
        log_file: Optional file to also write records to
        enable_rich: Use rich console output instead of a plain stream handler

    Returns:
        The configured ``inspector_relay`` logger
    """
    level = (level or "INFO").upper()
    enable_rich = enable_rich if enable_rich is not None else True

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)

    # clear existing handlers so repeated calls do not duplicate output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if enable_rich:
        rich_handler = RichHandler(
            rich_tracebacks=True, show_time=True, show_level=True, show_path=False
        )
        rich_handler.setLevel(level)
        logger.addHandler(rich_handler)
    else:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Get a logger

    Names outside the package namespace are nested under it so that records
    reach the handlers installed by ``configure_logging``.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
