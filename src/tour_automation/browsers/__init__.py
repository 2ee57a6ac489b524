"""
Browsers module - Browser-backed content surfaces.
"""

from tour_automation.browsers.playwright_driver import PlaywrightPageDriver, launch_page

__all__ = [
    "PlaywrightPageDriver",
    "launch_page",
]
