"""
Tests for configuration system.
"""

import pytest

from tour_automation.config import (
    BrowserSettings,
    ConfigLoader,
    RecorderSettings,
    Settings,
    get_settings,
    load_config,
    reset_settings,
)
from tour_automation.exceptions import ConfigurationError


@pytest.fixture
def isolated_cwd(tmp_path, monkeypatch):
    """Run from an empty directory so no stray config or .env is picked up."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(ConfigLoader, "DEFAULT_CONFIG_PATHS", [tmp_path / "tour-automation.yaml"])
    for name in ("TOUR_AUTOMATION__RECORDER__STEP_TIMEOUT_MS", "TOUR_AUTOMATION__BROWSER__HEADLESS"):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield tmp_path
    reset_settings()


class TestSettings:
    """Test the Settings classes."""

    def test_default_settings(self, isolated_cwd):
        """Test default settings are created correctly."""
        settings = Settings()

        assert settings.browser.headless is False
        assert settings.recorder.protocol_tag == "tourEditor"
        assert settings.recorder.default_delay_ms == 300
        assert settings.recorder.step_timeout_ms == 5000
        assert settings.recorder.data_attributes == ["data-module", "data-mode", "data-step", "data-card"]

    def test_merge_with_overrides(self, isolated_cwd):
        """Test merging settings with overrides."""
        settings = Settings().merge_with({
            "browser": {"headless": True},
            "recorder": {"max_path_depth": 3},
        })

        assert settings.browser.headless is True
        assert settings.recorder.max_path_depth == 3
        # Other settings should remain default
        assert settings.browser.browser_type == "chromium"

    def test_env_override(self, isolated_cwd, monkeypatch):
        """Test nested environment variables."""
        monkeypatch.setenv("TOUR_AUTOMATION__RECORDER__STEP_TIMEOUT_MS", "8000")
        assert Settings().recorder.step_timeout_ms == 8000

    def test_validation(self):
        """Test validation of bounded settings."""
        assert RecorderSettings(max_path_depth=8).max_path_depth == 8
        with pytest.raises(ValueError):
            RecorderSettings(max_path_depth=0)
        with pytest.raises(ValueError):
            BrowserSettings(timeout_ms=100)


class TestConfigLoader:
    """Test loading from files."""

    def test_yaml_file(self, isolated_cwd):
        path = isolated_cwd / "custom.yaml"
        path.write_text("recorder:\n  default_delay_ms: 150\nbrowser:\n  headless: true\n")

        settings = load_config(config_path=path)

        assert settings.recorder.default_delay_ms == 150
        assert settings.browser.headless is True

    def test_default_path_discovered(self, isolated_cwd):
        (isolated_cwd / "tour-automation.yaml").write_text("recorder:\n  step_timeout_ms: 2500\n")
        assert load_config().recorder.step_timeout_ms == 2500

    def test_overrides_win(self, isolated_cwd):
        path = isolated_cwd / "custom.yaml"
        path.write_text("recorder:\n  default_delay_ms: 150\n")

        settings = load_config(config_path=path, recorder={"default_delay_ms": 50})
        assert settings.recorder.default_delay_ms == 50

    def test_missing_explicit_file(self, isolated_cwd):
        with pytest.raises(ConfigurationError):
            load_config(config_path=isolated_cwd / "nope.yaml")

    def test_non_mapping_file(self, isolated_cwd):
        path = isolated_cwd / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError):
            load_config(config_path=path)

    def test_invalid_yaml(self, isolated_cwd):
        path = isolated_cwd / "broken.yaml"
        path.write_text("recorder: [unclosed\n")
        with pytest.raises(ConfigurationError):
            load_config(config_path=path)

    def test_get_settings_is_cached(self, isolated_cwd):
        assert get_settings() is get_settings()
        first = get_settings()
        reset_settings()
        assert get_settings() is not first

    def test_json_file(self, isolated_cwd):
        path = isolated_cwd / "tour-automation.json"
        path.write_text('{"recorder": {"max_path_depth": 3}}')

        assert load_config(config_path=path).recorder.max_path_depth == 3

    def test_env_fills_what_file_leaves_out(self, isolated_cwd, monkeypatch):
        monkeypatch.setenv("TOUR_AUTOMATION__RECORDER__STEP_TIMEOUT_MS", "2500")
        path = isolated_cwd / "custom.yaml"
        path.write_text("recorder:\n  default_delay_ms: 150\n")

        settings = load_config(config_path=path)

        assert settings.recorder.default_delay_ms == 150
        assert settings.recorder.step_timeout_ms == 2500
