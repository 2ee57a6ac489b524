"""
Bridge module - The message channel across the content surface boundary.
"""

from tour_automation.bridge.messages import (
    PROTOCOL_TAG,
    ChannelMessage,
    Command,
    Event,
)
from tour_automation.bridge.transport import ITransport, LoopbackTransport
from tour_automation.bridge.channel import ContentChannel, Subscription

__all__ = [
    "PROTOCOL_TAG",
    "ChannelMessage",
    "Command",
    "Event",
    "ITransport",
    "LoopbackTransport",
    "ContentChannel",
    "Subscription",
]
