"""
Content Surface - the agent living on the content side of the channel.

It is the only component holding a page driver. It answers editor
commands (record, pick, replay, highlight) and reports interactions
back as channel events, with selectors already synthesized since only
this side can see the document.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from tour_automation.bridge.channel import ContentChannel
from tour_automation.bridge.messages import ChannelMessage, Command, Event
from tour_automation.dom.selector_engine import SelectorEngine, parse_document
from tour_automation.exceptions import (
    InvalidActionShape,
    NoUniqueSelector,
    SelectorResolutionFailure,
)
from tour_automation.interfaces.driver import CapturedInteraction, IPageDriver
from tour_automation.recorder.actions import DEFAULT_DELAY_MS, Action, ActionKind

logger = logging.getLogger(__name__)


class ContentSurface:
    """
    Content-side command handler.

    Example:
        >>> surface = ContentSurface(content_channel, PlaywrightPageDriver(page))
        >>> surface.attach()
    """

    def __init__(
        self,
        channel: ContentChannel,
        driver: IPageDriver,
        engine: Optional[SelectorEngine] = None,
        capture_marker: str = "data-tour-capture",
        default_delay_ms: int = DEFAULT_DELAY_MS,
    ):
        """
        Initialize the surface.

        Args:
            channel: Content side of the channel
            driver: DOM access for the page
            engine: Selector engine used for synthesis
            capture_marker: Attribute marking the interacted element in snapshots
            default_delay_ms: Delay given to recorded actions
        """
        self._channel = channel
        self._driver = driver
        self._engine = engine or SelectorEngine()
        self._marker = capture_marker
        self._default_delay_ms = default_delay_ms
        self._recording = False
        self._selecting = False
        self._attached = False

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def is_selecting(self) -> bool:
        return self._selecting

    def attach(self) -> None:
        """Start answering commands and announce readiness."""
        if self._attached:
            return
        handlers = {
            Command.START_RECORDING: self._on_start_recording,
            Command.STOP_RECORDING: self._on_stop_recording,
            Command.ENABLE_ELEMENT_SELECTION: self._on_enable_selection,
            Command.DISABLE_ELEMENT_SELECTION: self._on_disable_selection,
            Command.PERFORM_ACTION: self._on_perform_action,
            Command.EXECUTE_ACTIONS: self._on_execute_actions,
            Command.HIGHLIGHT: self._on_highlight,
            Command.CLEAR_HIGHLIGHT: self._on_clear_highlight,
        }
        for message_type, handler in handlers.items():
            self._channel.on_event(message_type, handler, owner=self)
        self._attached = True
        self._channel.send(Event.BRIDGE_READY, {})
        logger.debug("Content surface attached")

    async def detach(self) -> None:
        """Stop answering commands and release the page."""
        self._channel.revoke_owner(self)
        self._attached = False
        if self._recording:
            self._recording = False
            await self._driver.stop_capture()
        if self._selecting:
            self._selecting = False
            await self._driver.disable_selection()

    # ==================== Recording ====================

    async def _on_start_recording(self, message: ChannelMessage) -> None:
        self._recording = True
        await self._driver.start_capture(self._on_captured)
        logger.info("Capturing interactions")

    async def _on_stop_recording(self, message: ChannelMessage) -> None:
        self._recording = False
        await self._driver.stop_capture()
        logger.info("Stopped capturing interactions")

    def _on_captured(self, interaction: CapturedInteraction) -> None:
        if not self._recording:
            return
        try:
            kind = ActionKind.parse(interaction.kind)
        except InvalidActionShape:
            logger.debug(f"Ignoring unsupported interaction {interaction.kind!r}")
            return

        selector = self.resolve_interaction(interaction)
        if selector is None:
            return

        action = Action(
            kind=kind,
            target=selector,
            value=interaction.value if kind is ActionKind.INPUT else None,
            delay_ms=self._default_delay_ms,
        )
        self._channel.send(Event.ACTION_RECORDED, action.to_dict())

    def resolve_interaction(self, interaction: CapturedInteraction, warn: bool = True) -> Optional[str]:
        """
        Synthesize a selector for the element marked in a snapshot.

        A non-unique result still returns the best-effort path and, when
        ``warn`` is set, sends a ``selectorWarning`` so the author can fix it.
        """
        document = parse_document(interaction.html)
        element = document.select_one(f"[{self._marker}]")
        if element is None:
            logger.warning("Captured snapshot has no marked element")
            return None
        del element[self._marker]

        try:
            return self._engine.synthesize(element)
        except NoUniqueSelector as e:
            best = e.best_effort
            selector = best.selector if best else element.name
            if not warn:
                return selector
            self._channel.send(Event.SELECTOR_WARNING, {
                "selector": selector,
                "matchCount": best.match_count if best else 0,
                "reason": e.message,
            })
            logger.warning(f"{e.message}; using {selector!r}")
            return selector

    # ==================== Element selection ====================

    async def _on_enable_selection(self, message: ChannelMessage) -> None:
        self._selecting = True
        await self._driver.enable_selection(self._on_picked)

    async def _on_disable_selection(self, message: ChannelMessage) -> None:
        self._selecting = False
        await self._driver.disable_selection()

    def _on_picked(self, interaction: CapturedInteraction) -> None:
        if not self._selecting:
            return
        if interaction.kind == "hover":
            selector = self.resolve_interaction(interaction, warn=False)
            if selector is not None:
                self._channel.send(Event.ELEMENT_HOVER, {"selector": selector, "rect": interaction.rect})
            return
        selector = self.resolve_interaction(interaction)
        if selector is not None:
            self._channel.send(Event.ELEMENT_SELECTED, selector)

    # ==================== Replay ====================

    async def _on_perform_action(self, message: ChannelMessage) -> None:
        data = message.data if isinstance(message.data, dict) else {}
        outcome = await self.perform(data.get("action"))
        outcome["requestId"] = data.get("requestId")
        outcome["index"] = data.get("index")
        self._channel.send(Event.ACTION_PERFORMED, outcome)

    async def _on_execute_actions(self, message: ChannelMessage) -> None:
        raw_actions = message.data if isinstance(message.data, list) else []
        outcomes: List[Dict[str, Any]] = []
        for index, raw in enumerate(raw_actions):
            outcome = await self.perform(raw)
            outcome["index"] = index
            outcomes.append(outcome)
            delay = raw.get("delay") if isinstance(raw, dict) else None
            if not isinstance(delay, int) or delay < 0:
                delay = self._default_delay_ms
            await asyncio.sleep(delay / 1000)
        self._channel.send(Event.ACTIONS_COMPLETED, {"outcomes": outcomes})

    async def perform(self, raw_action: Any) -> Dict[str, Any]:
        """
        Perform one action against the page.

        Failures are returned in the outcome, never raised.

        Returns:
            Outcome dict with ``success``, ``error`` and ``matchCount``
        """
        match_count = 0
        try:
            action = Action.from_dict(raw_action)
            if action.kind is ActionKind.WAIT:
                return {"success": True, "error": None, "matchCount": 0}
            match_count = await self._resolve(action.target)
            await self._interact(action)
        except (InvalidActionShape, SelectorResolutionFailure) as e:
            match_count = getattr(e, "match_count", match_count)
            logger.warning(f"Action failed: {e.message}")
            return {"success": False, "error": e.message, "matchCount": match_count}
        except Exception as e:
            logger.warning(f"Interaction failed: {e}")
            return {"success": False, "error": str(e), "matchCount": match_count}
        return {"success": True, "error": None, "matchCount": match_count}

    async def _resolve(self, selector: Optional[str]) -> int:
        if not selector:
            raise SelectorResolutionFailure("Action has no target", selector="", match_count=0)
        try:
            count = await self._driver.count(selector)
        except ValueError as e:
            raise SelectorResolutionFailure(f"Invalid selector {selector!r}: {e}", selector=selector) from e
        if count == 0:
            raise SelectorResolutionFailure(f"Target not found: {selector}", selector=selector)
        if count > 1:
            raise SelectorResolutionFailure(
                f"Target is ambiguous ({count} matches): {selector}",
                selector=selector,
                match_count=count,
            )
        return count

    async def _interact(self, action: Action) -> None:
        target = action.target
        if action.kind is ActionKind.CLICK:
            await self._driver.click(target)
        elif action.kind is ActionKind.DOUBLE_CLICK:
            await self._driver.double_click(target)
        elif action.kind is ActionKind.INPUT:
            await self._driver.fill(target, action.value or "")
        elif action.kind is ActionKind.SCROLL:
            await self._driver.scroll_into_view(target)

    # ==================== Highlight ====================

    async def _on_highlight(self, message: ChannelMessage) -> None:
        data = message.data if isinstance(message.data, dict) else {}
        selector = data.get("selector")
        if not selector:
            await self._driver.highlight(None)
            return
        try:
            count = await self._driver.count(selector)
        except ValueError:
            count = 0
        if count >= 1:
            await self._driver.highlight(selector)
        self._channel.send(Event.ELEMENT_HIGHLIGHTED, {"selector": selector, "matchCount": count})

    async def _on_clear_highlight(self, message: ChannelMessage) -> None:
        await self._driver.highlight(None)
