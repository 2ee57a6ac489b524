"""
Tour Editor - controller-side view over one content surface.

Owns the action list being authored for a tour step and the recording,
picking and replay components that fill it. Every channel listener the
view creates is tagged with the view as owner, so ``teardown`` revokes
them all at once.

Example:
    >>> editor = TourEditor(channel)
    >>> editor.mount()
    >>> editor.toggle_recording()       # start
    >>> editor.toggle_recording()       # stop, actions now hold the recording
    >>> report = await editor.test_actions()
    >>> editor.teardown()
"""

import logging
from typing import Any, Callable, List, Optional, Union

from tour_automation.bridge.channel import ContentChannel
from tour_automation.bridge.messages import Command
from tour_automation.recorder.actions import (
    DEFAULT_DELAY_MS,
    Action,
    ActionKind,
    ActionSequence,
    export_actions,
    normalize_actions,
    parse_delay,
)
from tour_automation.recorder.picker import PickController
from tour_automation.recorder.presets import create_preset
from tour_automation.recorder.session import RecordingSession
from tour_automation.replay.interpreter import ReplayInterpreter, ReplayReport

logger = logging.getLogger(__name__)


class TourEditor:
    """Action authoring over a content channel."""

    def __init__(
        self,
        channel: ContentChannel,
        step_timeout_ms: int = 5000,
        default_delay_ms: int = DEFAULT_DELAY_MS,
    ):
        self._channel = channel
        self._default_delay_ms = default_delay_ms
        self.recording = RecordingSession(channel, owner=self)
        self.picker = PickController(channel, owner=self)
        self.interpreter = ReplayInterpreter(channel, step_timeout_ms=step_timeout_ms, owner=self)
        self._actions: List[Action] = []
        self._mounted = False

    @property
    def actions(self) -> ActionSequence:
        """The action list being authored."""
        return list(self._actions)

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    def mount(self) -> None:
        self._mounted = True
        logger.debug("Editor view mounted")

    def teardown(self) -> None:
        """Stop recording and picking and revoke every listener of this view."""
        self.recording.teardown()
        self.picker.cancel()
        revoked = self._channel.revoke_owner(self)
        self._mounted = False
        logger.debug(f"Editor view torn down ({revoked} listener(s) revoked)")

    # ==================== Recording ====================

    def toggle_recording(self) -> Optional[ActionSequence]:
        """
        Start recording, or stop and adopt the recorded actions.

        Returns:
            The recorded actions when stopping with a non-empty recording
        """
        if not self.recording.is_recording:
            self.picker.cancel()
            self.recording.start()
            return None

        recorded = self.recording.stop()
        if recorded:
            self._actions = list(recorded)
        return recorded

    # ==================== Editing ====================

    def add_action(
        self,
        kind: Union[ActionKind, str] = ActionKind.CLICK,
        target: str = "",
        value: Optional[str] = None,
        delay_ms: Optional[int] = None,
    ) -> Action:
        """Append a new, possibly still incomplete, action."""
        action = Action(
            kind=kind,
            target=target,
            value=value,
            delay_ms=self._default_delay_ms if delay_ms is None else delay_ms,
        )
        self._actions.append(action)
        return action

    def remove_action(self, index: int) -> Action:
        return self._actions.pop(index)

    def update_action(self, index: int, **changes: Any) -> Action:
        """Edit fields of one action, e.g. ``update_action(0, target="#next")``."""
        action = self._actions[index]
        for name in changes:
            if name not in ("kind", "target", "value", "delay_ms"):
                raise AttributeError(f"Action has no editable field {name!r}")
        if "kind" in changes:
            changes["kind"] = ActionKind.parse(changes["kind"])
        if "delay_ms" in changes:
            changes["delay_ms"] = parse_delay(changes["delay_ms"], path=f"actions[{index}]")
        for name, value in changes.items():
            setattr(action, name, value)
        return action

    def load_actions(self, raw: Any) -> None:
        """Load stored actions (single object, list or None)."""
        self._actions = normalize_actions(raw)

    def clear_actions(self) -> None:
        self._actions = []

    def apply_preset(self, name: str) -> ActionSequence:
        self._actions = create_preset(name)
        return self.actions

    def actions_data(self) -> Any:
        """The actions in persisted form (None, one object, or a list)."""
        return export_actions(self._actions)

    # ==================== Picking ====================

    def pick_action_target(
        self,
        index: int,
        on_done: Optional[Callable[[Action], None]] = None,
        on_hover: Optional[Callable[[str, Optional[dict]], None]] = None,
    ) -> None:
        """Arm element picking and write the picked selector into one action."""
        action = self._actions[index]

        def _resolved(selector: str) -> None:
            action.target = selector
            logger.info(f"Action {index + 1} target set to {selector!r}")
            if on_done is not None:
                on_done(action)

        self.picker.begin(_resolved, on_hover=on_hover)

    def pick(
        self,
        on_resolved: Callable[[str], None],
        on_hover: Optional[Callable[[str, Optional[dict]], None]] = None,
    ) -> None:
        self.picker.begin(on_resolved, on_hover=on_hover)

    # ==================== Preview ====================

    async def test_actions(self) -> ReplayReport:
        """Replay the authored actions against the content surface."""
        if not self._actions:
            logger.warning("No actions to test")
            return ReplayReport()
        return await self.interpreter.execute(self.actions)

    def highlight(self, selector: Optional[str]) -> None:
        if selector:
            self._channel.send(Command.HIGHLIGHT, {"selector": selector})
        else:
            self._channel.send(Command.CLEAR_HIGHLIGHT)
