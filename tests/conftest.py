"""
Pytest configuration and fixtures.
"""

import asyncio
from typing import Dict, List, Optional, Tuple

import pytest
import soupsieve as sv

from tour_automation.bridge import ContentChannel, LoopbackTransport
from tour_automation.dom.selector_engine import parse_document
from tour_automation.interfaces.driver import (
    CapturedInteraction,
    InteractionCallback,
    IPageDriver,
)
from tour_automation.recorder.picker import PickController

FLASHCARDS_HTML = """
<html>
<body>
  <div id="app">
    <nav class="modes">
      <button class="mode-btn active" data-mode="review">Review</button>
      <button class="mode-btn" data-mode="test">Test</button>
    </nav>
    <button id="startBtn" class="btn primary">Start</button>
    <div class="deck">
      <div class="card">One</div>
      <div class="card">Two</div>
    </div>
    <ul class="options">
      <li class="option">A</li>
      <li class="option">B</li>
      <li class="option">C</li>
    </ul>
    <input id="answerInput" type="text">
    <button class="submit-btn">Submit</button>
  </div>
</body>
</html>
"""

# Two identical subtrees: shallow paths cannot tell them apart
TWIN_SECTIONS_HTML = """
<html>
<body>
  <section><span>x</span></section>
  <section><span>x</span></section>
</body>
</html>
"""


class FakePageDriver(IPageDriver):
    """
    In-memory page driver over a parsed HTML document.

    Records every interaction in ``calls`` and lets tests emit captured
    or picked interactions the way a browser bridge would.
    """

    def __init__(self, html: str = FLASHCARDS_HTML, marker: str = "data-tour-capture"):
        self.document = parse_document(html)
        self.marker = marker
        self.calls: List[Tuple] = []
        self.failures: Dict[str, Exception] = {}
        self.capture_callback: Optional[InteractionCallback] = None
        self.selection_callback: Optional[InteractionCallback] = None
        self.highlighted: Optional[str] = None

    async def start_capture(self, callback: InteractionCallback) -> None:
        self.capture_callback = callback
        self.calls.append(("start_capture",))

    async def stop_capture(self) -> None:
        self.capture_callback = None
        self.calls.append(("stop_capture",))

    async def enable_selection(self, callback: InteractionCallback) -> None:
        self.selection_callback = callback
        self.calls.append(("enable_selection",))

    async def disable_selection(self) -> None:
        self.selection_callback = None
        self.calls.append(("disable_selection",))

    async def count(self, selector: str) -> int:
        try:
            return len(self.document.select(selector))
        except sv.SelectorSyntaxError as e:
            raise ValueError(str(e)) from e

    async def click(self, selector: str) -> None:
        self._interact("click", selector)

    async def double_click(self, selector: str) -> None:
        self._interact("dblclick", selector)

    async def fill(self, selector: str, value: str) -> None:
        self._interact("fill", selector, value)

    async def scroll_into_view(self, selector: str) -> None:
        self._interact("scroll", selector)

    async def highlight(self, selector: Optional[str]) -> None:
        self.highlighted = selector

    def _interact(self, name: str, selector: str, *args) -> None:
        if selector in self.failures:
            raise self.failures[selector]
        self.calls.append((name, selector) + args)

    def snapshot(self, selector: str) -> str:
        """Serialize the document with the matched element marked."""
        element = self.document.select_one(selector)
        element[self.marker] = ""
        try:
            return str(self.document)
        finally:
            del element[self.marker]

    def emit_capture(self, kind: str, selector: str, value: Optional[str] = None) -> None:
        assert self.capture_callback is not None, "capture is not running"
        self.capture_callback(CapturedInteraction(kind=kind, html=self.snapshot(selector), value=value))

    def emit_selection(self, selector: str) -> None:
        assert self.selection_callback is not None, "selection is not armed"
        self.selection_callback(CapturedInteraction(kind="click", html=self.snapshot(selector)))

    def emit_hover(self, selector: str, rect: Optional[Dict[str, float]] = None) -> None:
        assert self.selection_callback is not None, "selection is not armed"
        self.selection_callback(CapturedInteraction(kind="hover", html=self.snapshot(selector), rect=rect))


@pytest.fixture
def settings():
    """Provide test settings."""
    from tour_automation.config import Settings, BrowserSettings, RecorderSettings

    return Settings(
        browser=BrowserSettings(headless=True),
        recorder=RecorderSettings(step_timeout_ms=500, default_delay_ms=10),
    )


@pytest.fixture
def driver():
    """Provide a fake page driver showing the flashcards app."""
    return FakePageDriver()


@pytest.fixture
def channels():
    """Provide a linked (controller, content) channel pair."""
    controller_side, content_side = LoopbackTransport.pair()
    controller = ContentChannel(controller_side)
    content = ContentChannel(content_side)

    yield controller, content

    controller.close()
    content.close()


@pytest.fixture
def settle():
    """Let queued channel deliveries and handler tasks run."""
    async def _settle(seconds: float = 0.01) -> None:
        await asyncio.sleep(seconds)

    return _settle


@pytest.fixture(autouse=True)
def reset_armed_picker():
    """Only one picker is armed per process; isolate tests from each other."""
    PickController._armed = None
    yield
    PickController._armed = None
