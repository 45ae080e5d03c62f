"""
Manages loading, validation, and migration of the INI configuration file.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from torbox_cli.exceptions import ConfigurationError
from torbox_cli.models.config import TorboxConfig

log = logging.getLogger(__name__)


class ConfigManager:
    """Handles all operations related to the application's INI config file."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser(interpolation=None)

    def load_config(
        self, cli_options: dict[str, Any] | None = None, missing_ok: bool = False
    ) -> TorboxConfig:
        """
        Loads configuration from the INI file, applies CLI overrides, and validates it.

        Args:
            cli_options: A dictionary of options provided via the command line.
            missing_ok: Fall back to defaults instead of failing when the file
                does not exist.

        Returns:
            A validated TorboxConfig object.

        Raises:
            ConfigurationError: If the config file is missing, invalid, or validation
            fails.
        """
        config_from_file: dict[str, Any] = {}

        if self.config_file_path.is_file():
            try:
                self._parser.read(self.config_file_path, encoding="utf-8")
            except configparser.Error as e:
                raise ConfigurationError(f"Error parsing configuration file: {e}") from e

            if self._migrate_if_needed():
                log.info(
                    "[yellow]Configuration file was updated with new default values."
                    "[/yellow]"
                )
            config_from_file = self._get_config_as_dict()
        elif not missing_ok:
            raise ConfigurationError(
                f"Configuration file not found at '{self.config_file_path}'. "
                "Please run 'torbox-cli init' first."
            )

        # Override with CLI options
        if cli_options:
            config_from_file.update(cli_options)

        try:
            config_dir = self.config_file_path.parent
            return TorboxConfig(**config_from_file, config_path=str(config_dir))
        except (ValidationError, ValueError) as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def save_new_config(self, settings: dict[str, Any]) -> None:
        """
        Creates and saves a new configuration file.

        Args:
            settings: A dictionary of settings to save.
        """
        config = configparser.ConfigParser(interpolation=None)
        config["DEFAULT"] = {}

        defaults = TorboxConfig.model_construct()
        for key in sorted(TorboxConfig.get_ini_keys()):
            # Use provided settings first, then fall back to model defaults
            value = settings.get(key, getattr(defaults, key, None))
            config["DEFAULT"][key] = self._to_ini_value(value)

        self._write(config)

    def set_value(self, key: str, value: Any) -> None:
        """Updates a single key, creating the file with defaults if needed."""
        if key not in TorboxConfig.get_ini_keys():
            raise ConfigurationError(f"Unknown configuration key: '{key}'")

        if not self.config_file_path.is_file():
            self.save_new_config({key: value})
            return

        try:
            self._parser.read(self.config_file_path, encoding="utf-8")
        except configparser.Error as e:
            raise ConfigurationError(f"Error parsing configuration file: {e}") from e

        self._parser["DEFAULT"][key] = self._to_ini_value(value)
        self._write(self._parser)

    def read_value(self, key: str) -> str | None:
        """Reads a single raw value, or None if the file or key is absent."""
        if not self.config_file_path.is_file():
            return None
        try:
            self._parser.read(self.config_file_path, encoding="utf-8")
        except configparser.Error as e:
            raise ConfigurationError(f"Error parsing configuration file: {e}") from e
        return self._parser["DEFAULT"].get(key) or None

    @staticmethod
    def _to_ini_value(value: Any) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if value is None:
            return ""
        return str(value)

    def _write(self, config: configparser.ConfigParser) -> None:
        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Reads the 'DEFAULT' section of the INI file into a dictionary."""
        section = self._parser["DEFAULT"]
        defaults = TorboxConfig.model_construct()
        try:
            return {
                "api_key": section.get("api_key", ""),
                "api_base": section.get("api_base", defaults.api_base),
                "request_timeout": section.getfloat(
                    "request_timeout", defaults.request_timeout
                ),
                "poll_interval": section.getfloat(
                    "poll_interval", defaults.poll_interval
                ),
                "max_poll_attempts": section.getint(
                    "max_poll_attempts", defaults.max_poll_attempts
                ),
                "open_browser": section.getboolean(
                    "open_browser", defaults.open_browser
                ),
            }
        except ValueError as e:
            raise ConfigurationError(f"Invalid value in configuration file: {e}") from e

    def _migrate_if_needed(self) -> bool:
        """Adds missing default values to an existing config file."""
        defaults = TorboxConfig.model_construct()
        config_section = self._parser["DEFAULT"]
        needs_saving = False

        for key in sorted(TorboxConfig.get_ini_keys()):
            if key not in config_section:
                config_section[key] = self._to_ini_value(getattr(defaults, key))
                needs_saving = True
                log.debug(
                    f"Migrating config: added missing key '{key}' with "
                    f"value '{config_section[key]}'."
                )

        if needs_saving:
            try:
                with open(self.config_file_path, "w", encoding="utf-8") as f:
                    self._parser.write(f)
            except OSError as e:
                log.error(f"Could not save migrated configuration file: {e}")
                return False

        return needs_saving
