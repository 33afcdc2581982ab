"""
Logging setup for the divelist core.

Every module logs through `logging.getLogger(__name__)`; applications
embedding the core call setup_logging() once at startup.
"""

import sys
import logging
from typing import Optional

from .constants import APP_NAME, LOG_FORMAT, LOG_DATE_FORMAT
from .settings import Settings, get_settings


def setup_logging(settings: Optional[Settings] = None) -> logging.Logger:
    """
    Configure logging for the application.

    Sets up console output with the configured level and pretty formatting.
    Suppresses noisy third-party loggers.

    Args:
        settings: Settings to take the level from (defaults to global settings)

    Returns:
        The configured root logger
    """
    if settings is None:
        settings = get_settings()

    level = logging.DEBUG if settings.debug_mode else getattr(logging, settings.log_level)

    # Create formatter with timestamp, level, module name
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    # Console handler (stdout)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    # Root logger, replacing handlers from an earlier call
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if getattr(handler, "_divelist_handler", False):
            root_logger.removeHandler(handler)
    console_handler._divelist_handler = True
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    # Suppress noisy third-party loggers
    logging.getLogger("PySide6").setLevel(logging.WARNING)

    logging.info(f"{APP_NAME} {settings.app_version} - logging initialized at {logging.getLevelName(level)}")
    return root_logger
