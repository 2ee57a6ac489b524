"""
Selector-related exceptions.
"""

from typing import Any, Optional

from tour_automation.exceptions.base import TourAutomationError


class SelectorError(TourAutomationError):
    """Base exception for selector synthesis and resolution errors."""
    pass


class NoUniqueSelector(SelectorError):
    """
    No strategy produced a selector matching exactly one element.

    Carries the best-effort ancestor path so callers can still offer it
    to the author for hand editing.

    Attributes:
        best_effort: The non-unique fallback candidate, if one was built
    """

    def __init__(self, message: str, best_effort: Optional[Any] = None):
        selector = getattr(best_effort, "selector", None)
        match_count = getattr(best_effort, "match_count", None)
        super().__init__(message, {"selector": selector, "match_count": match_count})
        self.best_effort = best_effort


class SelectorResolutionFailure(SelectorError):
    """
    A selector did not resolve to exactly one element at replay time.

    Attributes:
        selector: The selector that was resolved
        match_count: Number of elements it matched
    """

    def __init__(self, message: str, selector: str, match_count: int = 0):
        super().__init__(message, {"selector": selector, "match_count": match_count})
        self.selector = selector
        self.match_count = match_count
