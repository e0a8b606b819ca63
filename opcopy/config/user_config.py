"""
User configuration management for opcopy.

Settings are read from multiple sources:
1. Environment variables (highest precedence)
2. Command-line provided config file
3. Config file in current directory
4. User's XDG config directory
5. Default values (lowest precedence)
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from opcopy.config.models import ProfileConfig, UserConfigData
from opcopy.core.errors import ConfigError


logger = logging.getLogger(__name__)

ENV_PREFIX = "OPCOPY_"


class UserConfig:
    """Manages user-specific configuration for opcopy.

    The first YAML file found on the search path provides file values;
    ``OPCOPY_*`` environment variables override them.
    """

    def __init__(self, cli_config_path: str | Path | None = None):
        """
        Initialize the user configuration handler.

        Args:
            cli_config_path: Optional config file path provided via CLI

        Raises:
            ConfigError: If the config file is unreadable or invalid
        """
        self._config_sources: dict[str, str] = {}
        self._main_config_path: Path | None = None
        self._config_paths = self._generate_config_paths(cli_config_path)
        self._load_config()

    @property
    def data(self) -> UserConfigData:
        """Validated configuration values."""
        return self._config

    @property
    def config_file_path(self) -> Path | None:
        """Path of the config file that was loaded, if any."""
        return self._main_config_path

    @property
    def config_paths(self) -> list[Path]:
        """Config file search path, in order of precedence."""
        return list(self._config_paths)

    def _generate_config_paths(self, cli_config_path: str | Path | None) -> list[Path]:
        """Generate a list of config paths to search in order of precedence."""
        config_paths = []

        if cli_config_path:
            config_paths.append(Path(cli_config_path).expanduser().resolve())

        config_paths.extend([Path.cwd() / "opcopy.yaml", Path.cwd() / ".opcopy.yml"])

        xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
        if xdg_config_home:
            config_paths.append(Path(xdg_config_home) / "opcopy" / "config.yaml")
        else:
            config_paths.append(Path.home() / ".config" / "opcopy" / "config.yaml")

        return config_paths

    def _read_config_file(self, path: Path) -> dict[str, Any]:
        try:
            with path.open(encoding="utf-8") as f:
                raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Error parsing config file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Error reading config file {path}: {e}") from e

        if raw_config is None:
            return {}
        if not isinstance(raw_config, dict):
            raise ConfigError(f"Invalid config file format: {path}")
        return raw_config

    def _load_config(self) -> None:
        config_data: dict[str, Any] = {}

        for path in self._config_paths:
            if path.is_file():
                config_data = self._read_config_file(path)
                self._main_config_path = path
                logger.debug("Loaded user configuration from %s", path)
                break
        else:
            logger.debug(
                "No user configuration files found in %s",
                [str(p) for p in self._config_paths],
            )

        try:
            self._config = UserConfigData(**config_data)
        except ValidationError as e:
            source = self._main_config_path or "environment"
            raise ConfigError(f"Invalid configuration from {source}: {e}") from e

        self._track_sources(config_data)

    def _track_sources(self, config_data: dict[str, Any]) -> None:
        if self._main_config_path is not None:
            for key in config_data:
                self._config_sources[key] = f"file:{self._main_config_path.name}"

        for env_name in os.environ:
            if not env_name.upper().startswith(ENV_PREFIX):
                continue
            config_key = env_name[len(ENV_PREFIX) :].lower().split("__", 1)[0]
            if config_key in UserConfigData.model_fields:
                self._config_sources[config_key] = "environment"

    def get_source(self, key: str) -> str:
        """
        Get the source of a configuration value.

        Returns:
            ``environment``, ``file:<name>`` or ``default``
        """
        return self._config_sources.get(key, "default")

    def get_profile(self, name: str) -> ProfileConfig | None:
        """Return a named profile, or None if it is not configured."""
        return self._config.profiles.get(name)

    def get_profiles(self) -> dict[str, dict[str, str]]:
        """All profiles as plain option dictionaries."""
        return {
            name: profile.to_options() for name, profile in self._config.profiles.items()
        }

    def get_log_level_int(self) -> int:
        """Get the configured log level as a logging module constant."""
        return self._config.get_log_level_int()


def create_user_config(cli_config_path: str | Path | None = None) -> UserConfig:
    """
    Factory function to create a UserConfig instance.

    Args:
        cli_config_path: Optional config file path provided via CLI

    Returns:
        Configured UserConfig instance
    """
    return UserConfig(cli_config_path=cli_config_path)
