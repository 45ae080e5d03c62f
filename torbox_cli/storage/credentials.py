"""
Stores for the single TorBox API key the workflow needs.
"""

import logging
import os
from typing import Optional, Protocol

from .config_manager import ConfigManager

log = logging.getLogger(__name__)

API_KEY_ENV_VAR = "TORBOX_API_KEY"


class CredentialStore(Protocol):
    """Holds one opaque API credential."""

    def get(self) -> Optional[str]: ...

    def set(self, credential: str) -> None: ...


class MemoryCredentialStore:
    """Keeps the credential in memory for the lifetime of the process."""

    def __init__(self, credential: Optional[str] = None):
        self._credential = credential

    def get(self) -> Optional[str]:
        return self._credential or None

    def set(self, credential: str) -> None:
        self._credential = credential


class ConfigCredentialStore:
    """
    Reads the API key from the environment or the INI config file.

    The `TORBOX_API_KEY` environment variable takes precedence over the
    `api_key` entry of the config file. `set` always writes the file.
    """

    def __init__(
        self, config_manager: ConfigManager, env_var: Optional[str] = API_KEY_ENV_VAR
    ):
        self.config_manager = config_manager
        self.env_var = env_var

    def get(self) -> Optional[str]:
        from_env = os.getenv(self.env_var, "").strip() if self.env_var else ""
        if from_env:
            log.debug(f"Using API key from ${self.env_var}")
            return from_env
        return self.config_manager.read_value("api_key")

    def set(self, credential: str) -> None:
        self.config_manager.set_value("api_key", credential.strip())
