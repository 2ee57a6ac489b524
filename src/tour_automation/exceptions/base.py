"""
Root of the tour automation exception hierarchy.
"""

from typing import Any, Dict, Optional


class TourAutomationError(Exception):
    """
    Base class for every error raised by this package.

    Attributes:
        message: What went wrong, for people
        details: Structured context (selector, path, url...) for logs and reports
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        context = ", ".join(f"{key}={value!r}" for key, value in self.details.items() if value is not None)
        return f"{self.message} ({context})" if context else self.message


class ConfigurationError(TourAutomationError):
    """A config file, environment variable or override is unusable."""
    pass
