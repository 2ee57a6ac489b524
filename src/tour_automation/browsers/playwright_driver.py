"""
Playwright Page Driver - IPageDriver over a live browser page.

A small bridge script is installed in every document the page loads.
It reports interactions to Python through an exposed binding, marking
the interacted element with the capture marker attribute only for the
duration of the snapshot it sends.

A browser double click arrives as click, click, dblclick. The page drops
the second click, and the driver holds the first one back for the
double-click window so a following dblclick replaces it.
"""

import asyncio
import inspect
import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional, TYPE_CHECKING

from tour_automation.exceptions import BrowserLaunchError, NavigationError
from tour_automation.interfaces.driver import (
    CapturedInteraction,
    InteractionCallback,
    IPageDriver,
)

if TYPE_CHECKING:
    from playwright.async_api import Page
    from tour_automation.config.settings import BrowserSettings

logger = logging.getLogger(__name__)

BINDING_NAME = "_tourEditorPost"

BRIDGE_JS = r"""
(function() {
    const MARKER = %(marker)s;
    const COLOR = %(color)s;
    if (window.tourEditorBridge) {
        window.tourEditorBridge.reset();
    }

    function snapshot(el) {
        el.setAttribute(MARKER, '');
        try {
            return document.documentElement.outerHTML;
        } finally {
            el.removeAttribute(MARKER);
        }
    }

    function bounds(el) {
        const rect = el.getBoundingClientRect();
        return { top: rect.top, left: rect.left, width: rect.width, height: rect.height };
    }

    function post(mode, kind, el, value) {
        try {
            if (window.%(binding)s) {
                window.%(binding)s(JSON.stringify({
                    mode: mode,
                    kind: kind,
                    value: value === undefined ? null : value,
                    rect: bounds(el),
                    html: snapshot(el)
                }));
            }
        } catch (e) {
            console.warn('[TourEditor] Failed to report interaction:', e);
        }
    }

    const bridge = {
        capturing: false,
        selecting: false,
        hovered: null,
        highlighted: null,

        onClick(e) {
            if (!bridge.capturing || bridge.selecting) return;
            if (e.detail > 1) return;
            post('capture', 'click', e.target);
        },
        onDblClick(e) {
            if (!bridge.capturing || bridge.selecting) return;
            post('capture', 'dblclick', e.target);
        },
        onChange(e) {
            if (!bridge.capturing) return;
            const tag = e.target.tagName;
            if (tag === 'INPUT' || tag === 'TEXTAREA' || tag === 'SELECT') {
                post('capture', 'input', e.target, e.target.value);
            }
        },
        onMouseOver(e) {
            if (!bridge.selecting) return;
            e.stopPropagation();
            if (bridge.hovered) bridge.hovered.style.outline = '';
            bridge.hovered = e.target;
            e.target.style.outline = '2px solid ' + COLOR;
            post('selection', 'hover', e.target);
        },
        onSelectClick(e) {
            if (!bridge.selecting) return;
            e.preventDefault();
            e.stopPropagation();
            if (bridge.hovered) {
                bridge.hovered.style.outline = '';
                bridge.hovered = null;
            }
            post('selection', 'click', e.target);
        },

        setCapture(on) {
            bridge.capturing = !!on;
        },
        setSelection(on) {
            bridge.selecting = !!on;
            document.body && (document.body.style.cursor = on ? 'crosshair' : '');
            if (!on && bridge.hovered) {
                bridge.hovered.style.outline = '';
                bridge.hovered = null;
            }
        },
        highlight(selector) {
            if (bridge.highlighted) {
                bridge.highlighted.style.outline = '';
                bridge.highlighted.style.outlineOffset = '';
                bridge.highlighted = null;
            }
            if (!selector) return;
            const el = document.querySelector(selector);
            if (!el) return;
            el.style.outline = '3px dashed ' + COLOR;
            el.style.outlineOffset = '2px';
            el.scrollIntoView({ behavior: 'smooth', block: 'center' });
            bridge.highlighted = el;
        },
        reset() {
            document.removeEventListener('click', bridge.onSelectClick, true);
            document.removeEventListener('click', bridge.onClick, true);
            document.removeEventListener('dblclick', bridge.onDblClick, true);
            document.removeEventListener('change', bridge.onChange, true);
            document.removeEventListener('mouseover', bridge.onMouseOver, true);
            bridge.setSelection(false);
            bridge.highlight(null);
        }
    };

    document.addEventListener('click', bridge.onSelectClick, true);
    document.addEventListener('click', bridge.onClick, true);
    document.addEventListener('dblclick', bridge.onDblClick, true);
    document.addEventListener('change', bridge.onChange, true);
    document.addEventListener('mouseover', bridge.onMouseOver, true);
    window.tourEditorBridge = bridge;
})();
"""


class PlaywrightPageDriver(IPageDriver):
    """
    Drive a Playwright page as the content surface.

    Example:
        >>> driver = PlaywrightPageDriver(page)
        >>> await driver.install()
        >>> await driver.count("#startBtn")
        1
    """

    def __init__(
        self,
        page: "Page",
        capture_marker: str = "data-tour-capture",
        action_timeout_ms: int = 2000,
        highlight_color: str = "#4CAF50",
        double_click_window_ms: int = 500,
    ):
        """
        Initialize the driver.

        Args:
            page: Playwright page showing the target application
            capture_marker: Attribute marking the interacted element in snapshots
            action_timeout_ms: Timeout for each replayed interaction
            highlight_color: Outline color for highlights
            double_click_window_ms: How long a captured click waits for a
                dblclick that replaces it (0 reports clicks at once)
        """
        self._page = page
        self._timeout_ms = action_timeout_ms
        self._double_click_window_ms = double_click_window_ms
        self._pending_click: Optional[CapturedInteraction] = None
        self._pending_click_handle: Optional[asyncio.TimerHandle] = None
        self._script = BRIDGE_JS % {
            "marker": json.dumps(capture_marker),
            "color": json.dumps(highlight_color),
            "binding": BINDING_NAME,
        }
        self._capture_callback: Optional[InteractionCallback] = None
        self._selection_callback: Optional[InteractionCallback] = None
        self._installed = False
        self._tasks: set = set()

    async def install(self) -> None:
        """Expose the binding and install the bridge in current and future documents."""
        if self._installed:
            return
        try:
            await self._page.expose_function(BINDING_NAME, self._handle_js_event)
        except Exception as e:
            # Binding survives from an earlier driver on the same page
            logger.debug(f"expose_function: {e}")
        await self._page.add_init_script(self._script)
        await self._evaluate(self._script)
        self._page.on("load", lambda: self._spawn(self._on_load()))
        self._installed = True

    async def start_capture(self, callback: InteractionCallback) -> None:
        await self.install()
        self._capture_callback = callback
        await self._evaluate("on => window.tourEditorBridge && window.tourEditorBridge.setCapture(on)", True)

    async def stop_capture(self) -> None:
        self._flush_pending_click()
        self._capture_callback = None
        await self._evaluate("on => window.tourEditorBridge && window.tourEditorBridge.setCapture(on)", False)

    async def enable_selection(self, callback: InteractionCallback) -> None:
        await self.install()
        self._selection_callback = callback
        await self._evaluate("on => window.tourEditorBridge && window.tourEditorBridge.setSelection(on)", True)

    async def disable_selection(self) -> None:
        self._selection_callback = None
        await self._evaluate("on => window.tourEditorBridge && window.tourEditorBridge.setSelection(on)", False)

    async def count(self, selector: str) -> int:
        from playwright.async_api import Error as PlaywrightError

        try:
            return await self._page.locator(selector).count()
        except PlaywrightError as e:
            raise ValueError(str(e)) from e

    async def click(self, selector: str) -> None:
        await self._page.locator(selector).click(timeout=self._timeout_ms)

    async def double_click(self, selector: str) -> None:
        await self._page.locator(selector).dblclick(timeout=self._timeout_ms)

    async def fill(self, selector: str, value: str) -> None:
        locator = self._page.locator(selector)
        await locator.fill(value, timeout=self._timeout_ms)
        await locator.dispatch_event("change", timeout=self._timeout_ms)

    async def scroll_into_view(self, selector: str) -> None:
        await self._page.locator(selector).scroll_into_view_if_needed(timeout=self._timeout_ms)

    async def highlight(self, selector: Optional[str]) -> None:
        await self.install()
        await self._evaluate("s => window.tourEditorBridge && window.tourEditorBridge.highlight(s)", selector)

    async def _on_load(self) -> None:
        # The init script reinstalls the bridge; restore the active modes
        if self._capture_callback is not None:
            await self._evaluate("on => window.tourEditorBridge && window.tourEditorBridge.setCapture(on)", True)
        if self._selection_callback is not None:
            await self._evaluate("on => window.tourEditorBridge && window.tourEditorBridge.setSelection(on)", True)

    async def _evaluate(self, script: str, arg: Any = None) -> Any:
        try:
            return await self._page.evaluate(script, arg)
        except Exception as e:
            logger.debug(f"Bridge evaluate error: {e}")
            return None

    def _handle_js_event(self, event_json: str) -> None:
        try:
            event = json.loads(event_json)
        except (TypeError, ValueError) as e:
            logger.warning(f"Malformed bridge event: {e}")
            return

        interaction = CapturedInteraction(
            kind=event.get("kind", ""),
            html=event.get("html", ""),
            value=event.get("value"),
            rect=event.get("rect"),
        )
        if event.get("mode") == "selection":
            self._dispatch(self._selection_callback, interaction)
            return
        if self._capture_callback is None:
            return

        if interaction.kind == "dblclick":
            # Replaces its own first click, still pending
            self._pending_click = None
            self._cancel_pending_timer()
        else:
            self._flush_pending_click()
            if interaction.kind == "click" and self._double_click_window_ms > 0:
                self._pending_click = interaction
                self._pending_click_handle = asyncio.get_running_loop().call_later(
                    self._double_click_window_ms / 1000, self._flush_pending_click
                )
                return
        self._dispatch(self._capture_callback, interaction)

    def _flush_pending_click(self) -> None:
        interaction, self._pending_click = self._pending_click, None
        self._cancel_pending_timer()
        if interaction is not None:
            self._dispatch(self._capture_callback, interaction)

    def _cancel_pending_timer(self) -> None:
        if self._pending_click_handle is not None:
            self._pending_click_handle.cancel()
            self._pending_click_handle = None

    def _dispatch(self, callback: Optional[InteractionCallback], interaction: CapturedInteraction) -> None:
        if callback is None:
            return
        result = callback(interaction)
        if inspect.isawaitable(result):
            self._spawn(result)

    def _spawn(self, awaitable: Any) -> None:
        task = asyncio.ensure_future(awaitable)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)


@asynccontextmanager
async def launch_page(
    settings: "BrowserSettings",
    url: Optional[str] = None,
) -> AsyncIterator["Page"]:
    """
    Launch a browser and open the target application.

    Args:
        settings: Browser settings
        url: Page to open

    Yields:
        The Playwright page
    """
    from playwright.async_api import async_playwright

    async with async_playwright() as playwright:
        launchers = {
            "chromium": playwright.chromium,
            "firefox": playwright.firefox,
            "webkit": playwright.webkit,
        }
        launcher = launchers.get(settings.browser_type, playwright.chromium)
        launch_options = {"headless": settings.headless, "slow_mo": settings.slow_mo}
        if settings.channel:
            launch_options["channel"] = settings.channel

        try:
            browser = await launcher.launch(**launch_options)
        except Exception as e:
            raise BrowserLaunchError(f"Failed to launch browser: {e}")

        logger.info(f"Launched {settings.browser_type} browser (headless={settings.headless})")
        try:
            context = await browser.new_context(
                viewport={"width": settings.viewport_width, "height": settings.viewport_height},
            )
            page = await context.new_page()
            page.set_default_timeout(settings.timeout_ms)
            if url:
                try:
                    await page.goto(url, wait_until="domcontentloaded")
                except Exception as e:
                    raise NavigationError(f"Failed to open {url}: {e}", url=url)
            yield page
        finally:
            await browser.close()
