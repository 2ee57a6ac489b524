"""
Errors from the browser that hosts the content surface.
"""

from typing import Optional

from tour_automation.exceptions.base import TourAutomationError


class BrowserError(TourAutomationError):
    """The browser hosting the content surface failed."""
    pass


class BrowserLaunchError(BrowserError):
    """
    Playwright could not start the browser.

    Usually the browser binaries are missing (``playwright install``) or
    a launch option is invalid for the chosen browser type.
    """
    pass


class NavigationError(BrowserError):
    """The target application did not load in the content surface."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message, {"url": url})
        self.url = url
