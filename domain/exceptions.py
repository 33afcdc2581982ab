"""
Custom exceptions for the divelist core.

All exceptions inherit from DiveLogBaseException for easier catching.
Each exception includes a message and optional details dict.

The core reports bad input through sentinel return values (-1, 0,
negative surface time). Exceptions are reserved for programmer errors
and invalid configuration.
"""


class DiveLogBaseException(Exception):
    """Base exception for all divelist-related errors."""

    def __init__(self, message: str, details: dict = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            details: Optional dict with additional context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """String representation with details if available."""
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class InvariantError(DiveLogBaseException, AssertionError):
    """A collection invariant was violated by the caller."""
    pass


class ValidationError(DiveLogBaseException):
    """Data validation failed."""
    pass
