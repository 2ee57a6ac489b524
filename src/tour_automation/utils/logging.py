"""
Logging setup for the CLI and embedding applications.

Console output goes through rich. Channel traffic (every command and
event crossing the content boundary) is logged at DEBUG by
``tour_automation.bridge`` and is kept out of the console unless
``trace_channel`` is set.
"""

import json
import logging
from typing import TYPE_CHECKING, Optional

from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from tour_automation.config.settings import LoggingSettings

CHANNEL_LOGGER = "tour_automation.bridge"

# Chatty third-party loggers that only matter when debugging the browser itself
NOISY_LOGGERS = ("asyncio", "playwright")


class JsonLineFormatter(logging.Formatter):
    """Render each record as a single-line JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = False,
    file_format: Optional[str] = None,
    trace_channel: bool = False,
) -> None:
    """
    Install console (and optionally file) handlers on the root logger.

    Args:
        level: Log level name
        log_file: Also write records to this file
        json_format: Write the file as one JSON object per line
        file_format: Format string for the plain-text file log
        trace_channel: Show individual channel messages on the console
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    console_handler.setLevel(log_level)
    root.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        if json_format:
            file_handler.setFormatter(JsonLineFormatter())
        else:
            file_handler.setFormatter(logging.Formatter(
                file_format or "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            ))
        root.addHandler(file_handler)

    logging.getLogger(CHANNEL_LOGGER).setLevel(logging.DEBUG if trace_channel else max(log_level, logging.INFO))
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def setup_logging_from_settings(settings: "LoggingSettings", verbose: bool = False) -> None:
    """
    Configure logging from the ``logging`` settings section.

    ``verbose`` lowers the level to DEBUG and traces channel traffic.
    """
    setup_logging(
        level="DEBUG" if verbose else settings.level,
        log_file=settings.file,
        json_format=settings.json_format,
        file_format=settings.format,
        trace_channel=verbose,
    )
