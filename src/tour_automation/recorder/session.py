"""
Recording Session - capture interactions from the content surface.

While recording, the content surface reports each interaction as an
``actionRecorded`` event carrying an action whose target selector was
synthesized on the content side. The session buffers them in arrival
order.

Example:
    >>> session = RecordingSession(channel)
    >>> session.start()
    >>> # Author interacts with the content surface...
    >>> actions = session.stop()
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from tour_automation.bridge.channel import ContentChannel, Subscription
from tour_automation.bridge.messages import ChannelMessage, Command, Event
from tour_automation.exceptions import InvalidActionShape, RecordingStateError
from tour_automation.recorder.actions import Action, ActionSequence

logger = logging.getLogger(__name__)


class RecordingState(str, Enum):
    """Recording session states."""
    IDLE = "idle"
    RECORDING = "recording"


class RecordingSession:
    """
    Idle -> Recording -> Idle state machine over a content channel.

    Only one listener is ever registered: starting while already
    recording is rejected.
    """

    def __init__(self, channel: ContentChannel, owner: Any = None):
        """
        Initialize the session.

        Args:
            channel: Controller side of the content channel
            owner: Owner tag for the session's listeners (defaults to the session)
        """
        self._channel = channel
        self._owner = owner if owner is not None else self
        self._state = RecordingState.IDLE
        self._buffer: List[Action] = []
        self._subscription: Optional[Subscription] = None
        self._result: Optional[ActionSequence] = None
        self._warnings: List[Dict[str, Any]] = []
        self._on_action_callbacks: List[Callable[[Action], None]] = []

    @property
    def state(self) -> RecordingState:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state is RecordingState.RECORDING

    @property
    def buffer(self) -> ActionSequence:
        """Actions captured so far in the current recording."""
        return list(self._buffer)

    @property
    def result(self) -> Optional[ActionSequence]:
        """The last non-empty sequence published by ``stop``."""
        return list(self._result) if self._result is not None else None

    @property
    def warnings(self) -> List[Dict[str, Any]]:
        """Selector warnings reported during the current recording."""
        return list(self._warnings)

    def on_action(self, callback: Callable[[Action], None]) -> None:
        """Register a callback for each recorded action."""
        self._on_action_callbacks.append(callback)

    def start(self) -> None:
        """
        Begin recording.

        Raises:
            RecordingStateError: If already recording
        """
        if self._state is RecordingState.RECORDING:
            raise RecordingStateError("Already recording. Call stop() first.", state=self._state.value)

        self._buffer = []
        self._warnings = []
        self._state = RecordingState.RECORDING
        self._subscription = self._channel.on_event(
            [Event.ACTION_RECORDED, Event.SELECTOR_WARNING],
            self._handle_event,
            owner=self._owner,
        )
        self._channel.send(Command.START_RECORDING)
        logger.info("Recording started")

    def stop(self) -> Optional[ActionSequence]:
        """
        Stop recording.

        Returns:
            The recorded sequence, or None if nothing was recorded. An
            empty recording leaves the previous result untouched.
        """
        if self._state is not RecordingState.RECORDING:
            return None

        self._release()
        if not self._channel.is_closed:
            self._channel.send(Command.STOP_RECORDING)

        recorded = self._buffer
        self._buffer = []
        if not recorded:
            logger.info("Recording stopped with no actions")
            return None

        self._result = list(recorded)
        logger.info(f"Recording stopped. Captured {len(recorded)} action(s)")
        return list(recorded)

    def teardown(self) -> None:
        """Drop the session without publishing, e.g. when the view unmounts."""
        if self._state is RecordingState.RECORDING and not self._channel.is_closed:
            self._channel.send(Command.STOP_RECORDING)
        self._release()
        self._buffer = []
        self._warnings = []

    def _release(self) -> None:
        self._state = RecordingState.IDLE
        if self._subscription is not None:
            self._subscription.revoke()
            self._subscription = None

    def _handle_event(self, message: ChannelMessage) -> None:
        if self._state is not RecordingState.RECORDING:
            return

        if message.type == Event.SELECTOR_WARNING:
            if isinstance(message.data, dict):
                self._warnings.append(message.data)
                logger.warning(f"Ambiguous selector recorded: {message.data.get('selector')}")
            return

        try:
            action = Action.from_dict(message.data, path=f"recording[{len(self._buffer)}]")
        except InvalidActionShape as e:
            logger.warning(f"Skipping malformed recorded action: {e}")
            return

        self._buffer.append(action)
        logger.debug(f"Recorded: {action.kind.value} -> {action.target}")

        for callback in self._on_action_callbacks:
            try:
                callback(action)
            except Exception as e:
                logger.warning(f"Action callback error: {e}")
