"""
Tour configuration validation.

Checks an authored tour configuration before it is published. A config
maps module names to either a list of steps or a mapping of phase name
to a list of steps. Keys starting with ``_`` are comments.

Errors carry a path locating the record, e.g. ``flashcards.review[2].preAction[0]``.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List

from tour_automation.exceptions import InvalidActionShape
from tour_automation.recorder.actions import ActionKind, ActionSequence, normalize_actions, parse_delay

logger = logging.getLogger(__name__)

VALID_POSITIONS = ("top", "bottom", "left", "right")


@dataclass
class ValidationReport:
    """Result of validating a tour configuration."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


def validate_tour_config(config: Any) -> ValidationReport:
    """
    Validate a complete tour configuration.

    Args:
        config: Parsed tour configuration

    Returns:
        Report with errors (blocking) and warnings (advisory)
    """
    report = ValidationReport()

    if not isinstance(config, dict):
        report.errors.append("Invalid configuration object")
        return report

    for module_name, module_config in config.items():
        if module_name.startswith("_"):
            continue

        if isinstance(module_config, list):
            for index, step in enumerate(module_config):
                validate_step(step, f"{module_name}[{index}]", report)
        elif isinstance(module_config, dict):
            for phase, steps in module_config.items():
                if not isinstance(steps, list):
                    report.errors.append(f"{module_name}.{phase} should be an array")
                    continue
                for index, step in enumerate(steps):
                    validate_step(step, f"{module_name}.{phase}[{index}]", report)
        else:
            report.errors.append(f"{module_name}: Invalid module configuration")

    for warning in report.warnings:
        logger.debug(warning)
    return report


def validate_step(step: Any, path: str, report: ValidationReport) -> None:
    """Validate one tour step, appending problems to the report."""
    if not isinstance(step, dict):
        report.errors.append(f"{path}: Invalid step object")
        return

    if not step.get("title"):
        report.warnings.append(f"{path}: Step has no title")
    if not step.get("description"):
        report.warnings.append(f"{path}: Step has no description")

    position = step.get("position")
    if position and position not in VALID_POSITIONS:
        report.errors.append(f'{path}: Invalid position "{position}"')

    if step.get("preAction"):
        validate_actions(step["preAction"], f"{path}.preAction", report)


def validate_actions(actions: Any, path: str, report: ValidationReport) -> None:
    """Validate a single action or a list of actions."""
    if isinstance(actions, list):
        for index, action in enumerate(actions):
            validate_action(action, f"{path}[{index}]", report)
    else:
        validate_action(actions, path, report)


def validate_action(action: Any, path: str, report: ValidationReport) -> None:
    """Validate one action record."""
    if not isinstance(action, dict):
        report.errors.append(f"{path}: Invalid action object")
        return

    action_type = action.get("type")
    try:
        kind = ActionKind.parse(action_type, path=path)
    except InvalidActionShape as e:
        report.errors.append(str(e))
        kind = None

    # A wait ignores its target; everything else needs one
    if kind is not ActionKind.WAIT and not _non_empty(action.get("target")):
        report.errors.append(f"{path}: Action requires target selector")

    try:
        parse_delay(action.get("delay"), path=path)
    except InvalidActionShape as e:
        report.errors.append(str(e))

    if kind is ActionKind.INPUT and not action.get("value"):
        report.warnings.append(f"{path}: Input action has no value")


def load_actions(raw: Any, path: str = "") -> ActionSequence:
    """
    Strictly import a stored action payload.

    Unlike ``normalize_actions`` this also rejects actions without a
    target, so the result is ready for replay.

    Raises:
        InvalidActionShape: With the path of the first offending record
    """
    sequence = normalize_actions(raw, path=path)
    for index, action in enumerate(sequence):
        if not action.is_valid:
            item_path = f"{path}[{index}]" if isinstance(raw, list) else path
            raise InvalidActionShape("Action requires target selector", path=item_path)
    return sequence


def _non_empty(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""
