"""
Content channel exceptions.
"""

from typing import Optional

from tour_automation.exceptions.base import TourAutomationError


class ChannelError(TourAutomationError):
    """Base exception for content channel errors."""
    pass


class ChannelProtocolMismatch(ChannelError):
    """
    Inbound message does not belong to this protocol.

    The channel shares its transport with unrelated traffic, so this is
    dropped by the channel and never surfaced to the user.
    """

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message, {"source": source})
        self.source = source


class ChannelClosedError(ChannelError):
    """Raised when sending on a channel that has been closed."""
    pass
