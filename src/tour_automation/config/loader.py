"""
Config Loader - Build Settings from files, .env and overrides.

Precedence, highest first:
    1. Overrides passed to ``load`` (CLI flags)
    2. The config file (YAML, or JSON for projects that keep tour data in JSON)
    3. ``TOUR_AUTOMATION__*`` environment variables, including ones set by .env
    4. Model defaults
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

import yaml
from dotenv import load_dotenv

from tour_automation.config.settings import Settings
from tour_automation.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class ConfigLoader:
    """
    Locate, read and validate the tour automation config.

    Example:
        >>> settings = ConfigLoader("tour-automation.yaml").load()
    """

    DEFAULT_CONFIG_PATHS = [
        Path("tour-automation.yaml"),
        Path("tour-automation.yml"),
        Path("tour-automation.json"),
        Path.home() / ".config" / "tour-automation" / "config.yaml",
    ]
    ENV_FILES = (Path(".env"), Path(".env.local"))

    def __init__(self, config_path: Optional[PathLike] = None):
        """
        Args:
            config_path: Explicit config file; it must exist
        """
        self.config_path = Path(config_path) if config_path else None

    def find_config_file(self) -> Optional[Path]:
        """
        The file to read: the explicit one, else the first default that exists.

        Raises:
            ConfigurationError: If an explicit path does not exist
        """
        if self.config_path is not None:
            if not self.config_path.is_file():
                raise ConfigurationError(
                    f"Config file not found: {self.config_path}",
                    {"path": str(self.config_path)},
                )
            return self.config_path
        return next((path for path in self.DEFAULT_CONFIG_PATHS if path.is_file()), None)

    @staticmethod
    def read_file(path: Path) -> Dict[str, Any]:
        """
        Parse a config file into a mapping.

        Raises:
            ConfigurationError: If the file is unparseable or not a mapping
        """
        text = path.read_text()
        try:
            data = json.loads(text) if path.suffix == ".json" else yaml.safe_load(text)
        except (ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot parse {path}: {e}", {"path": str(path)}) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"{path} must contain a mapping of settings sections",
                {"path": str(path), "found": type(data).__name__},
            )
        return data

    def load_env(self, env_file: Optional[PathLike] = None) -> None:
        """Export variables from ``env_file`` or the first local .env found."""
        candidates: Iterable[Path] = [Path(env_file)] if env_file else self.ENV_FILES
        for path in candidates:
            if path.is_file():
                load_dotenv(path)
                logger.debug(f"Loaded environment from {path}")
                return

    def load(
        self,
        env_file: Optional[PathLike] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> Settings:
        """
        Build Settings from every source.

        Args:
            env_file: .env file to export before reading the environment
            overrides: Nested section values that win over everything else

        Returns:
            Validated settings
        """
        self.load_env(env_file)

        file_values: Dict[str, Any] = {}
        config_file = self.find_config_file()
        if config_file is not None:
            file_values = self.read_file(config_file)
            logger.debug(f"Loaded config from {config_file}")

        # File values are init kwargs: they beat the environment key by key,
        # and the environment fills in whatever the file leaves out
        settings = Settings(**file_values)
        return settings.merge_with(overrides) if overrides else settings


def load_config(
    config_path: Optional[PathLike] = None,
    env_file: Optional[PathLike] = None,
    **overrides: Any,
) -> Settings:
    """
    Load settings in one call.

    Example:
        >>> load_config()
        >>> load_config(config_path="ci.yaml", browser={"headless": True})
    """
    return ConfigLoader(config_path).load(env_file=env_file, overrides=overrides or None)
