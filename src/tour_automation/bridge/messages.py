"""
Channel messages - the wire unit of the content channel.

Every message is a plain dict ``{"source": tag, "type": name, "data": payload}``.
The source tag separates this protocol from unrelated traffic sharing
the same transport.
"""

from dataclasses import dataclass
from typing import Any, Dict

from tour_automation.exceptions import ChannelProtocolMismatch

PROTOCOL_TAG = "tourEditor"


class Command:
    """Controller -> content surface message types."""
    START_RECORDING = "startRecording"
    STOP_RECORDING = "stopRecording"
    ENABLE_ELEMENT_SELECTION = "enableElementSelection"
    DISABLE_ELEMENT_SELECTION = "disableElementSelection"
    EXECUTE_ACTIONS = "executeActions"
    PERFORM_ACTION = "performAction"
    HIGHLIGHT = "highlight"
    CLEAR_HIGHLIGHT = "clearHighlight"


class Event:
    """Content surface -> controller message types."""
    BRIDGE_READY = "bridgeReady"
    ACTION_RECORDED = "actionRecorded"
    ELEMENT_HOVER = "elementHover"
    ELEMENT_SELECTED = "elementSelected"
    SELECTOR_WARNING = "selectorWarning"
    ACTION_PERFORMED = "actionPerformed"
    ACTIONS_COMPLETED = "actionsCompleted"
    ELEMENT_HIGHLIGHTED = "elementHighlighted"


@dataclass(frozen=True)
class ChannelMessage:
    """
    A single message on the content channel.

    Attributes:
        type: Command or event name
        data: JSON-compatible payload
        source: Protocol tag
    """
    type: str
    data: Any = None
    source: str = PROTOCOL_TAG

    def to_dict(self) -> Dict[str, Any]:
        return {"source": self.source, "type": self.type, "data": self.data}

    @classmethod
    def from_wire(cls, raw: Any, protocol_tag: str = PROTOCOL_TAG) -> "ChannelMessage":
        """
        Parse an inbound wire message.

        Raises:
            ChannelProtocolMismatch: If the message is not tagged for this protocol
        """
        if not isinstance(raw, dict):
            raise ChannelProtocolMismatch("Untagged message")
        source = raw.get("source")
        if source != protocol_tag:
            raise ChannelProtocolMismatch(f"Foreign message source {source!r}", source=source)
        message_type = raw.get("type")
        if not isinstance(message_type, str) or not message_type:
            raise ChannelProtocolMismatch("Message has no type", source=source)
        return cls(type=message_type, data=raw.get("data"), source=source)
