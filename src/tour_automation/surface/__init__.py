"""
Surface module - The content side of the channel.
"""

from tour_automation.surface.content_surface import ContentSurface

__all__ = ["ContentSurface"]
