"""
Application settings for the divelist core.

Loads settings from environment variables or uses defaults.
Provides centralized configuration management.
"""

import os
from typing import Optional
from dataclasses import dataclass

from domain.validators import (
    validate_log_level,
    validate_gradient_factors,
    validate_positive_int,
)
from .constants import (
    APP_VERSION,
    DEFAULT_DECO_SAC,
    DEFAULT_GF_LOW,
    DEFAULT_GF_HIGH,
    DEFAULT_O2_CONSUMPTION,
    DEFAULT_PSCR_RATIO,
)


@dataclass
class Settings:
    """
    Application settings.

    Can be loaded from environment variables or initialized with defaults.
    """

    # Application info
    app_version: str = APP_VERSION

    # Dive list
    autogroup: bool = False

    # Decompression / physiology
    deco_sac: int = DEFAULT_DECO_SAC  # ml/min, used for surface intervals
    gf_low: int = DEFAULT_GF_LOW
    gf_high: int = DEFAULT_GF_HIGH
    o2_consumption: int = DEFAULT_O2_CONSUMPTION  # ml/min, PSCR only
    pscr_ratio: int = DEFAULT_PSCR_RATIO

    # Debug settings
    debug_mode: bool = False
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR

    def __post_init__(self):
        """Validate settings after initialization."""
        self.log_level = validate_log_level(self.log_level)
        self.gf_low, self.gf_high = validate_gradient_factors(self.gf_low, self.gf_high)
        self.deco_sac = validate_positive_int(self.deco_sac, "deco_sac")
        self.o2_consumption = validate_positive_int(self.o2_consumption, "o2_consumption")
        self.pscr_ratio = validate_positive_int(self.pscr_ratio, "pscr_ratio")

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Load settings from environment variables.

        Environment variables:
        - DIVELOG_AUTOGROUP: Group new dives into trips automatically (true/false)
        - DIVELOG_DECO_SAC: Gas consumption used for surface intervals (ml/min)
        - DIVELOG_GF_LOW / DIVELOG_GF_HIGH: Gradient factors (percent)
        - DIVELOG_O2_CONSUMPTION: Metabolic O2 consumption for PSCR (ml/min)
        - DIVELOG_PSCR_RATIO: PSCR dump ratio
        - DIVELOG_DEBUG: Enable debug mode (true/false)
        - DIVELOG_LOG_LEVEL: Logging level (DEBUG/INFO/WARNING/ERROR)

        Returns:
            Settings instance with values from environment or defaults

        Raises:
            ValidationError: If a variable holds an invalid value
        """
        return cls(
            autogroup=os.getenv("DIVELOG_AUTOGROUP", "false").lower() == "true",
            deco_sac=os.getenv("DIVELOG_DECO_SAC", DEFAULT_DECO_SAC),
            gf_low=os.getenv("DIVELOG_GF_LOW", DEFAULT_GF_LOW),
            gf_high=os.getenv("DIVELOG_GF_HIGH", DEFAULT_GF_HIGH),
            o2_consumption=os.getenv("DIVELOG_O2_CONSUMPTION", DEFAULT_O2_CONSUMPTION),
            pscr_ratio=os.getenv("DIVELOG_PSCR_RATIO", DEFAULT_PSCR_RATIO),
            debug_mode=os.getenv("DIVELOG_DEBUG", "false").lower() == "true",
            log_level=os.getenv("DIVELOG_LOG_LEVEL", "INFO"),
        )

    def to_dict(self) -> dict:
        """Convert settings to dictionary for serialization."""
        return {
            "app_version": self.app_version,
            "autogroup": self.autogroup,
            "deco_sac": self.deco_sac,
            "gf_low": self.gf_low,
            "gf_high": self.gf_high,
            "o2_consumption": self.o2_consumption,
            "pscr_ratio": self.pscr_ratio,
            "debug_mode": self.debug_mode,
            "log_level": self.log_level,
        }


# Global settings instance (lazy-loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get global settings instance.

    Lazy-loaded on first call. Loads from environment variables.

    Returns:
        Settings instance

    Example:
        >>> from config.settings import get_settings
        >>> settings = get_settings()
        >>> print(settings.deco_sac)
    """
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reset_settings():
    """
    Reset global settings instance.

    Useful for testing - forces reload from environment on next get_settings() call.
    """
    global _settings
    _settings = None
