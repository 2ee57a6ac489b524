"""
Configuration - pydantic settings for the browser, recorder and logging.

``get_settings()`` returns a process-wide instance loaded on first use;
``load_config()`` always builds a fresh one, e.g. for a CLI ``--config``.

Environment Variables:
    TOUR_AUTOMATION__BROWSER__HEADLESS=true
    TOUR_AUTOMATION__RECORDER__STEP_TIMEOUT_MS=8000
    TOUR_AUTOMATION__LOGGING__LEVEL=DEBUG
"""

from typing import Optional

from tour_automation.config.loader import ConfigLoader, load_config
from tour_automation.config.settings import (
    BrowserSettings,
    LoggingSettings,
    RecorderSettings,
    Settings,
)

_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """The shared settings, loaded from the environment and config file once."""
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def reset_settings() -> None:
    """Forget the shared settings so the next ``get_settings()`` reloads them."""
    global _settings
    _settings = None


__all__ = [
    "Settings",
    "BrowserSettings",
    "RecorderSettings",
    "LoggingSettings",
    "ConfigLoader",
    "load_config",
    "get_settings",
    "reset_settings",
]
