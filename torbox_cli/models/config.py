"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_API_BASE = "https://api.torbox.app/v1/api"
DEFAULT_POLL_INTERVAL = 3.0
DEFAULT_MAX_POLL_ATTEMPTS = 200  # ~10 minutes at the default interval


class TorboxConfig(BaseModel):
    """A validated configuration model for the application."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    # Authentication & API
    api_key: str = ""
    api_base: str = DEFAULT_API_BASE
    request_timeout: float = 60.0

    # Polling
    poll_interval: float = DEFAULT_POLL_INTERVAL
    max_poll_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS

    # Behaviour
    open_browser: bool = False

    # Internal fields not loaded from INI file
    config_path: str = Field(..., repr=False)

    @field_validator("api_base")
    @classmethod
    def validate_api_base(cls, v: str) -> str:
        """Ensures the API base is an http(s) URL without a trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"API base must be an http(s) URL, got: {v}")
        return v.rstrip("/")

    @field_validator("poll_interval")
    @classmethod
    def validate_poll_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Poll interval must be greater than zero seconds.")
        return v

    @field_validator("max_poll_attempts")
    @classmethod
    def validate_max_poll_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Max poll attempts must be at least 1.")
        return v

    @field_validator("request_timeout")
    @classmethod
    def validate_request_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Request timeout must be greater than zero seconds.")
        return v

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
