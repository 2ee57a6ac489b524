"""
Interfaces module - Abstract contracts between components.
"""

from tour_automation.interfaces.driver import (
    IPageDriver,
    CapturedInteraction,
    InteractionCallback,
)

__all__ = [
    "IPageDriver",
    "CapturedInteraction",
    "InteractionCallback",
]
