"""
Page Driver Interface - DOM access owned by the content surface.

Only the content surface holds a driver. The editor reaches the page
exclusively through channel commands, never through this interface.

Implementations:
    - PlaywrightPageDriver: a live browser page driven by Playwright
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional, Union


@dataclass
class CapturedInteraction:
    """
    A user interaction observed in the page.

    Attributes:
        kind: Action kind name (click, dblclick, input, scroll), or
            ``hover`` while element selection is on
        html: Document snapshot with the target marked by the capture marker
        value: Entered text for input interactions
        rect: Viewport bounds of the target (top, left, width, height)
    """
    kind: str
    html: str
    value: Optional[str] = None
    rect: Optional[Dict[str, float]] = None


InteractionCallback = Callable[[CapturedInteraction], Union[None, Awaitable[None]]]


class IPageDriver(ABC):
    """
    Abstract interface over the content surface's document.

    Capture and selection deliver interactions through callbacks; the
    driver marks the interacted element with the capture marker attribute
    inside the snapshot it hands over.
    """

    @abstractmethod
    async def start_capture(self, callback: InteractionCallback) -> None:
        """
        Begin reporting user interactions.

        Args:
            callback: Called once per interaction, in the order they happen
        """
        ...

    @abstractmethod
    async def stop_capture(self) -> None:
        """Stop reporting interactions."""
        ...

    @abstractmethod
    async def enable_selection(self, callback: InteractionCallback) -> None:
        """
        Arm element picking.

        The next click is swallowed (not passed to the page) and reported
        to the callback. Elements under the pointer are reported as
        ``hover`` interactions until then.
        """
        ...

    @abstractmethod
    async def disable_selection(self) -> None:
        """Disarm element picking."""
        ...

    @abstractmethod
    async def count(self, selector: str) -> int:
        """
        Count elements matching a selector.

        Raises:
            ValueError: If the selector is malformed
        """
        ...

    @abstractmethod
    async def click(self, selector: str) -> None:
        ...

    @abstractmethod
    async def double_click(self, selector: str) -> None:
        ...

    @abstractmethod
    async def fill(self, selector: str, value: str) -> None:
        """Set the element's value and fire input/change events."""
        ...

    @abstractmethod
    async def scroll_into_view(self, selector: str) -> None:
        ...

    @abstractmethod
    async def highlight(self, selector: Optional[str]) -> None:
        """Outline the matched element, or clear the outline when None."""
        ...
