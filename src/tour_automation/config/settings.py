"""
Settings - pydantic models for every configurable knob.

Sections:
    browser   How the content surface's browser is launched and driven
    recorder  Channel tag, selector synthesis rules and replay timing
    logging   Console and file logging
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BrowserSettings(BaseModel):
    """
    Browser hosting the content surface.

    Recording and picking need a visible window, so ``headless`` is off
    unless replay is run unattended.

    Attributes:
        browser_type: Playwright browser to launch
        channel: Branded build to launch instead (``chrome``, ``msedge``)
        timeout_ms: Default timeout for navigation and page calls
        slow_mo: Pause Playwright inserts between operations (ms)
        action_timeout_ms: Timeout of each replayed click, fill or scroll
        highlight_color: Outline color for picking and highlights
        double_click_window_ms: How long a recorded click waits for a dblclick
    """
    browser_type: Literal["chromium", "firefox", "webkit"] = "chromium"
    channel: Optional[str] = None
    headless: bool = False
    timeout_ms: int = Field(default=30000, ge=1000, le=300000)
    viewport_width: int = Field(default=1280, ge=320, le=3840)
    viewport_height: int = Field(default=720, ge=240, le=2160)
    slow_mo: int = Field(default=0, ge=0, le=5000)

    # Per-interaction timeout when replaying an action
    action_timeout_ms: int = Field(default=2000, ge=100, le=60000)
    highlight_color: str = "#4CAF50"
    double_click_window_ms: int = Field(default=500, ge=0, le=2000)


class RecorderSettings(BaseModel):
    """
    Recording, selector synthesis and replay settings.

    Attributes:
        protocol_tag: Source tag stamped on every channel message
        default_delay_ms: Pause after an action when none is given
        step_timeout_ms: How long replay waits for a step outcome
        max_path_depth: Maximum segments in an ancestor-path selector
        data_attributes: Data attributes tried, in order, for selectors
        transient_class_prefixes: Class prefixes ignored by synthesis
        transient_class_markers: Class substrings ignored by synthesis
        capture_marker: Attribute used to mark the captured element
    """
    protocol_tag: str = "tourEditor"
    default_delay_ms: int = Field(default=300, ge=0, le=60000)
    step_timeout_ms: int = Field(default=5000, ge=100, le=120000)
    max_path_depth: int = Field(default=5, ge=1, le=20)
    data_attributes: List[str] = Field(
        default_factory=lambda: ["data-module", "data-mode", "data-step", "data-card"]
    )
    transient_class_prefixes: List[str] = Field(default_factory=lambda: ["tour-"])
    transient_class_markers: List[str] = Field(default_factory=lambda: ["active", "hover"])
    capture_marker: str = "data-tour-capture"


class LoggingSettings(BaseModel):
    """
    Console and file logging.

    Attributes:
        level: Root log level
        format: Line format of the plain-text file log
        file: Also log to this file
        json_format: Write the file log as JSON lines instead
    """
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None
    json_format: bool = False


def _deep_merge(base: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


class Settings(BaseSettings):
    """
    All tour automation settings.

    Nested sections map to ``TOUR_AUTOMATION__<SECTION>__<FIELD>``
    environment variables. Constructor arguments beat the environment.

    Example:
        >>> Settings(recorder=RecorderSettings(step_timeout_ms=2000))
    """

    model_config = SettingsConfigDict(
        env_prefix="TOUR_AUTOMATION__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    recorder: RecorderSettings = Field(default_factory=RecorderSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def merge_with(self, overrides: Dict[str, Any]) -> "Settings":
        """
        Copy with nested overrides applied, e.g. ``{"browser": {"headless": True}}``.

        The result is validated again, so bad override values raise.
        """
        return Settings(**_deep_merge(self.model_dump(), overrides))
