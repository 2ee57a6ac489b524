"""
Actions - The automation steps a tour runs before showing a step.

An action is one interaction (click, double click, text entry, scroll)
or a timed wait. A list of actions is replayed in order.

The persisted JSON shape is::

    {"type": "input", "target": "#answer", "value": "kabayo", "delay": 300}

A step may store a single action object or a list of them; both forms
are accepted on import and normalized to a list.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from tour_automation.exceptions import InvalidActionShape

DEFAULT_DELAY_MS = 300


def parse_delay(delay: Any, path: str = "") -> int:
    """
    Validate a persisted delay and return it in whole milliseconds.

    ``None`` means the default delay. Integral floats such as ``500.0`` are
    accepted; NaN and infinities are not.

    Raises:
        InvalidActionShape: If the delay is not a non-negative whole number
    """
    if delay is None:
        return DEFAULT_DELAY_MS
    if isinstance(delay, bool) or not isinstance(delay, (int, float)):
        raise InvalidActionShape(f'Invalid delay "{delay}"', path=path, value=delay)
    if isinstance(delay, float) and (not math.isfinite(delay) or not delay.is_integer()):
        raise InvalidActionShape(f'Invalid delay "{delay}"', path=path, value=delay)
    if delay < 0:
        raise InvalidActionShape("Delay must be non-negative", path=path, value=delay)
    return int(delay)


class ActionKind(str, Enum):
    """Types of automation actions."""
    CLICK = "click"
    DOUBLE_CLICK = "dblclick"
    INPUT = "input"
    SCROLL = "scroll"
    WAIT = "wait"

    @property
    def needs_target(self) -> bool:
        return self is not ActionKind.WAIT

    @classmethod
    def parse(cls, value: Any, path: str = "") -> "ActionKind":
        """Parse a kind name, rejecting anything outside the closed set."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidActionShape(f'Invalid action type "{value}"', path=path, value=value)


@dataclass
class Action:
    """
    A single automation step.

    Attributes:
        kind: What the step does
        target: CSS selector of the element acted on (unused for waits)
        value: Text entered by an input action
        delay_ms: Pause after the action before the next one runs
    """
    kind: ActionKind
    target: Optional[str] = None
    value: Optional[str] = None
    delay_ms: int = DEFAULT_DELAY_MS

    def __post_init__(self) -> None:
        self.kind = ActionKind.parse(self.kind)
        self.delay_ms = parse_delay(self.delay_ms)

    @property
    def is_valid(self) -> bool:
        """A wait is always valid; everything else needs a non-empty target."""
        if self.kind is ActionKind.WAIT:
            return True
        return bool(self.target and self.target.strip())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted JSON shape."""
        result: Dict[str, Any] = {"type": self.kind.value}
        if self.kind.needs_target and self.target:
            result["target"] = self.target
        if self.value:
            result["value"] = self.value
        result["delay"] = self.delay_ms
        return result

    @classmethod
    def from_dict(cls, data: Any, path: str = "") -> "Action":
        """
        Create from the persisted JSON shape.

        Args:
            data: Parsed JSON object
            path: Location of the record, used in error messages

        Returns:
            The parsed action

        Raises:
            InvalidActionShape: If the record is not a valid action
        """
        if not isinstance(data, dict):
            raise InvalidActionShape("Invalid action object", path=path, value=data)

        kind = ActionKind.parse(data.get("type"), path=path)

        delay_ms = parse_delay(data.get("delay"), path=path)

        target = data.get("target")
        value = data.get("value")
        if target is not None and not isinstance(target, str):
            raise InvalidActionShape("Action target must be a string", path=path, value=target)
        if value is not None and not isinstance(value, str):
            value = str(value)

        return cls(
            kind=kind,
            target=target if kind.needs_target else None,
            value=value,
            delay_ms=delay_ms,
        )


ActionSequence = List[Action]


def normalize_actions(raw: Union[None, Dict[str, Any], List[Any]], path: str = "") -> ActionSequence:
    """
    Normalize a stored action payload to a list of actions.

    Args:
        raw: None, a single action object, or a list of action objects
        path: Location of the payload, used in error messages

    Returns:
        The actions in replay order
    """
    if raw is None:
        return []
    if isinstance(raw, list):
        return [Action.from_dict(item, path=f"{path}[{i}]") for i, item in enumerate(raw)]
    return [Action.from_dict(raw, path=path)]


def export_actions(sequence: ActionSequence) -> Union[None, Dict[str, Any], List[Dict[str, Any]]]:
    """
    Convert a sequence to its persisted form.

    Actions still missing a target are dropped. Nothing left gives None,
    a single action is stored as a bare object.
    """
    valid = [action.to_dict() for action in sequence if action.is_valid]
    if not valid:
        return None
    if len(valid) == 1:
        return valid[0]
    return valid
