"""
Pick Controller - one-shot interactive element targeting.

Arms element selection in the content surface and hands the first
selector it reports to a callback. Only one controller can be armed at
a time in the process; arming another cancels the previous one.
While armed, elements under the pointer can be previewed through an
optional hover callback.
"""

import logging
from typing import Callable, ClassVar, Optional

from tour_automation.bridge.channel import ContentChannel, Subscription
from tour_automation.bridge.messages import ChannelMessage, Command, Event

logger = logging.getLogger(__name__)


class PickController:
    """
    Route one picked selector to a destination.

    Example:
        >>> picker = PickController(channel)
        >>> picker.begin(lambda selector: print("picked", selector))
    """

    _armed: ClassVar[Optional["PickController"]] = None

    def __init__(self, channel: ContentChannel, owner: object = None):
        self._channel = channel
        self._owner = owner if owner is not None else self
        self._subscription: Optional[Subscription] = None
        self._on_resolved: Optional[Callable[[str], None]] = None
        self._hover_subscription: Optional[Subscription] = None
        self._on_hover: Optional[Callable[[str, Optional[dict]], None]] = None

    @classmethod
    def armed(cls) -> Optional["PickController"]:
        """The controller currently armed in this process, if any."""
        return cls._armed

    @property
    def is_armed(self) -> bool:
        return self._subscription is not None

    def begin(
        self,
        on_resolved: Callable[[str], None],
        on_hover: Optional[Callable[[str, Optional[dict]], None]] = None,
    ) -> None:
        """
        Arm selection and wait for one element to be picked.

        Args:
            on_resolved: Called once with the picked selector
            on_hover: Called with the selector and viewport bounds of each
                element the pointer moves over before the pick
        """
        previous = PickController._armed
        if previous is not None:
            previous.cancel()
        if self.is_armed:
            self.cancel()

        self._on_resolved = on_resolved
        self._subscription = self._channel.on_event(
            Event.ELEMENT_SELECTED, self._handle_selected, owner=self._owner,
        )
        if on_hover is not None:
            self._on_hover = on_hover
            self._hover_subscription = self._channel.on_event(
                Event.ELEMENT_HOVER, self._handle_hover, owner=self._owner,
            )
        PickController._armed = self
        self._channel.send(Command.ENABLE_ELEMENT_SELECTION)
        logger.info("Click an element in the preview to select it")

    def cancel(self) -> None:
        """Disarm without calling back. Safe to call at any time."""
        if not self._disarm():
            return
        logger.debug("Element pick cancelled")

    def _disarm(self) -> bool:
        if self._subscription is None:
            return False
        self._subscription.revoke()
        self._subscription = None
        self._on_resolved = None
        if self._hover_subscription is not None:
            self._hover_subscription.revoke()
            self._hover_subscription = None
        self._on_hover = None
        if PickController._armed is self:
            PickController._armed = None
        if not self._channel.is_closed:
            self._channel.send(Command.DISABLE_ELEMENT_SELECTION)
        return True

    def _handle_selected(self, message: ChannelMessage) -> None:
        if self._subscription is None:
            return
        selector = message.data
        if isinstance(selector, dict):
            selector = selector.get("selector")
        if not isinstance(selector, str) or not selector:
            logger.warning("Element selection returned no selector")
            return

        callback = self._on_resolved
        self._disarm()
        if callback is not None:
            callback(selector)

    def _handle_hover(self, message: ChannelMessage) -> None:
        data = message.data if isinstance(message.data, dict) else {}
        selector = data.get("selector")
        if self._on_hover is None or not isinstance(selector, str) or not selector:
            return
        self._on_hover(selector, data.get("rect"))
