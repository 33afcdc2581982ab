"""
Configuration package for the divelist core.

Exports:
- AppContext: Dive-log state and dependency injection
- Settings: Application settings
- Constants: Application constants
- setup_logging: Logging configuration
"""

from .constants import (
    APP_NAME,
    APP_VERSION,
    TRIP_THRESHOLD,
    MAX_CYLINDERS,
    MAX_WEIGHTSYSTEMS,
    O2_IN_AIR,
    SURFACE_PRESSURE,
)
from .settings import Settings, get_settings, reset_settings
from .app_context import (
    AppContext,
    create_app_context,
    get_app_context,
    reset_app_context,
)
from .logging_config import setup_logging

__all__ = [
    # App Context
    "AppContext",
    "create_app_context",
    "get_app_context",
    "reset_app_context",
    # Settings
    "Settings",
    "get_settings",
    "reset_settings",
    "setup_logging",
    # Constants
    "APP_NAME",
    "APP_VERSION",
    "TRIP_THRESHOLD",
    "MAX_CYLINDERS",
    "MAX_WEIGHTSYSTEMS",
    "O2_IN_AIR",
    "SURFACE_PRESSURE",
]
