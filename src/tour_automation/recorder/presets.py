"""
Action presets - ready-made action lists for common tour steps.
"""

from typing import Dict, List, Tuple

from tour_automation.recorder.actions import Action, ActionKind, ActionSequence

# name -> (kind, target, value, delay_ms)
_PRESETS: Dict[str, List[Tuple[ActionKind, str, str, int]]] = {
    "flipCard": [
        (ActionKind.CLICK, ".card", "", 500),
    ],
    "startReview": [
        (ActionKind.CLICK, '.mode-btn[data-mode="review"]', "", 300),
        (ActionKind.CLICK, "#startBtn", "", 500),
    ],
    "startTest": [
        (ActionKind.CLICK, '.mode-btn[data-mode="test"]', "", 300),
        (ActionKind.CLICK, "#startBtn", "", 500),
    ],
    "enterText": [
        (ActionKind.INPUT, "#answerInput", "example", 300),
        (ActionKind.CLICK, "#submitBtn", "", 300),
    ],
    "navigate": [
        (ActionKind.CLICK, ".next-btn", "", 300),
    ],
}


def preset_names() -> List[str]:
    """Names of the available presets."""
    return list(_PRESETS)


def create_preset(name: str) -> ActionSequence:
    """
    Instantiate a preset as a fresh list of actions.

    Unknown names give an empty list.
    """
    return [
        Action(kind=kind, target=target, value=value or None, delay_ms=delay)
        for kind, target, value, delay in _PRESETS.get(name, [])
    ]
