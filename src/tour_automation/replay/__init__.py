"""
Replay module - Best-effort execution of recorded actions.
"""

from tour_automation.replay.interpreter import (
    ReplayInterpreter,
    ReplayReport,
    ActionOutcome,
)

__all__ = [
    "ReplayInterpreter",
    "ReplayReport",
    "ActionOutcome",
]
