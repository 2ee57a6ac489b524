"""
Exceptions - errors raised by tour automation.

Everything derives from ``TourAutomationError``, so callers can catch one
type at the CLI boundary and still branch on selector, channel, browser
or action failures.
"""

from tour_automation.exceptions.base import (
    TourAutomationError,
    ConfigurationError,
)
from tour_automation.exceptions.selector import (
    SelectorError,
    NoUniqueSelector,
    SelectorResolutionFailure,
)
from tour_automation.exceptions.channel import (
    ChannelError,
    ChannelProtocolMismatch,
    ChannelClosedError,
)
from tour_automation.exceptions.browser import (
    BrowserError,
    BrowserLaunchError,
    NavigationError,
)
from tour_automation.exceptions.action import (
    ActionError,
    InvalidActionShape,
    RecordingStateError,
)

__all__ = [
    # Base exceptions
    "TourAutomationError",
    "ConfigurationError",
    # Selector exceptions
    "SelectorError",
    "NoUniqueSelector",
    "SelectorResolutionFailure",
    # Channel exceptions
    "ChannelError",
    "ChannelProtocolMismatch",
    "ChannelClosedError",
    # Browser exceptions
    "BrowserError",
    "BrowserLaunchError",
    "NavigationError",
    # Action exceptions
    "ActionError",
    "InvalidActionShape",
    "RecordingStateError",
]
