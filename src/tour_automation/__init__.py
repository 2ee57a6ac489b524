"""
Tour Automation - record, target and replay actions for guided tours.

The editor drives a sandboxed content surface only through a message
channel: it records the author's interactions as actions with durable
CSS selectors, lets the author pick elements, and replays action lists
to smoke-test a tour.

Example:
    >>> from tour_automation import ContentChannel, LoopbackTransport, TourEditor
    >>> controller_side, content_side = LoopbackTransport.pair()
    >>> editor = TourEditor(ContentChannel(controller_side))
"""

__version__ = "0.1.0"

from tour_automation.bridge import ContentChannel, LoopbackTransport, ChannelMessage
from tour_automation.dom import SelectorEngine, SelectorCandidate, SelectorStrategy
from tour_automation.recorder import (
    Action,
    ActionKind,
    RecordingSession,
    PickController,
    normalize_actions,
    export_actions,
    validate_tour_config,
)
from tour_automation.replay import ReplayInterpreter, ReplayReport, ActionOutcome
from tour_automation.surface import ContentSurface
from tour_automation.editor import TourEditor

__all__ = [
    "__version__",
    "ContentChannel",
    "LoopbackTransport",
    "ChannelMessage",
    "SelectorEngine",
    "SelectorCandidate",
    "SelectorStrategy",
    "Action",
    "ActionKind",
    "RecordingSession",
    "PickController",
    "normalize_actions",
    "export_actions",
    "validate_tour_config",
    "ReplayInterpreter",
    "ReplayReport",
    "ActionOutcome",
    "ContentSurface",
    "TourEditor",
]
