"""
Input validators for the divelist core.

Used by the configuration layer before values reach the physiology engine.
All validators raise ValidationError on failure.
"""

from typing import Union

from .exceptions import ValidationError

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def validate_log_level(log_level: str) -> str:
    """
    Validate a logging level name.

    Args:
        log_level: Level name, case-insensitive (e.g. "debug")

    Returns:
        Upper-cased level name

    Raises:
        ValidationError: If the level is unknown
    """
    if not log_level:
        raise ValidationError("Log level cannot be empty")

    cleaned = log_level.strip().upper()
    if cleaned not in LOG_LEVELS:
        raise ValidationError(
            f"Unknown log level: {log_level}",
            details={"allowed": LOG_LEVELS},
        )
    return cleaned


def validate_percentage(value: Union[int, str], name: str = "value") -> int:
    """
    Validate an integer percentage in the range 1..100.

    Args:
        value: Percentage (int or numeric string)
        name: Field name for error messages

    Returns:
        Percentage as int

    Raises:
        ValidationError: If not an integer in range
    """
    try:
        percent = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer", details={name: value})

    if not 1 <= percent <= 100:
        raise ValidationError(f"{name} must be between 1 and 100", details={name: percent})
    return percent


def validate_gradient_factors(gf_low: int, gf_high: int) -> tuple:
    """
    Validate a gradient factor pair.

    Rules:
    - Both in 1..100
    - gf_low must not exceed gf_high

    Returns:
        Tuple (gf_low, gf_high)

    Raises:
        ValidationError: If invalid
    """
    gf_low = validate_percentage(gf_low, "gf_low")
    gf_high = validate_percentage(gf_high, "gf_high")
    if gf_low > gf_high:
        raise ValidationError(
            "gf_low cannot be larger than gf_high",
            details={"gf_low": gf_low, "gf_high": gf_high},
        )
    return gf_low, gf_high


def validate_positive_int(value: Union[int, str], name: str = "value") -> int:
    """Validate a strictly positive integer (rates, volumes)."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer", details={name: value})

    if number <= 0:
        raise ValidationError(f"{name} must be positive", details={name: number})
    return number
