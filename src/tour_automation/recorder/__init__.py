"""
Recorder module - Record, pick and validate tour actions.
"""

from tour_automation.recorder.actions import (
    Action,
    ActionKind,
    ActionSequence,
    normalize_actions,
    export_actions,
)
from tour_automation.recorder.session import RecordingSession, RecordingState
from tour_automation.recorder.picker import PickController
from tour_automation.recorder.presets import create_preset, preset_names
from tour_automation.recorder.validation import (
    ValidationReport,
    validate_tour_config,
    load_actions,
)

__all__ = [
    "Action",
    "ActionKind",
    "ActionSequence",
    "normalize_actions",
    "export_actions",
    "RecordingSession",
    "RecordingState",
    "PickController",
    "create_preset",
    "preset_names",
    "ValidationReport",
    "validate_tour_config",
    "load_actions",
]
