"""
Storage Layer.

This package handles the configuration file and the API key it holds.
"""

from .config_manager import ConfigManager
from .credentials import ConfigCredentialStore, CredentialStore, MemoryCredentialStore

__all__ = [
    "ConfigCredentialStore",
    "ConfigManager",
    "CredentialStore",
    "MemoryCredentialStore",
]
