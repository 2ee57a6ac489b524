"""
Tests for logging setup.
"""

import json
import logging

import pytest
from rich.logging import RichHandler

from tour_automation.config import LoggingSettings
from tour_automation.utils import setup_logging, setup_logging_from_settings
from tour_automation.utils.logging import CHANNEL_LOGGER


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger(CHANNEL_LOGGER).setLevel(logging.NOTSET)


class TestSetupLogging:
    def test_console_handler_installed(self):
        setup_logging(level="WARNING")

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], RichHandler)

    def test_channel_hidden_unless_traced(self):
        setup_logging(level="DEBUG")
        assert logging.getLogger(CHANNEL_LOGGER).level == logging.INFO

        setup_logging(level="DEBUG", trace_channel=True)
        assert logging.getLogger(CHANNEL_LOGGER).level == logging.DEBUG

    def test_json_file_log(self, tmp_path):
        log_file = tmp_path / "tour.log"
        setup_logging(level="INFO", log_file=str(log_file), json_format=True)

        logging.getLogger("tour_automation.test").info("replay finished")
        for handler in logging.getLogger().handlers:
            handler.flush()

        entry = json.loads(log_file.read_text())
        assert entry["message"] == "replay finished"
        assert entry["level"] == "INFO"

    def test_json_file_log_escapes_message(self, tmp_path):
        log_file = tmp_path / "tour.log"
        setup_logging(level="INFO", log_file=str(log_file), json_format=True)

        logging.getLogger("tour_automation.test").info('Clicked [data-mode="review"]\nthen waited')
        for handler in logging.getLogger().handlers:
            handler.flush()

        lines = log_file.read_text().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["message"] == 'Clicked [data-mode="review"]\nthen waited'

    def test_verbose_from_settings(self):
        setup_logging_from_settings(LoggingSettings(level="ERROR"), verbose=True)

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger(CHANNEL_LOGGER).level == logging.DEBUG
