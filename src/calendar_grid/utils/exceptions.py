"""Custom exceptions for Calendar Grid."""

from typing import Optional


class CalendarGridError(Exception):
    """Base exception for calendar grid errors."""


class MalformedInputError(CalendarGridError, ValueError):
    """Raised when a timestamp or event payload cannot be parsed."""

    token = "MALFORMED_INPUT"


class RecurrenceConfigError(CalendarGridError, ValueError):
    """Raised when a recurrence rule cannot be expanded."""

    def __init__(self, token: str, message: Optional[str] = None):
        self.token = token
        super().__init__(message or f"Invalid recurrence configuration: {token}")


class ConfigurationError(CalendarGridError):
    """Raised when configuration is invalid."""
