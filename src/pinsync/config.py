"""Runtime configuration for pinsync.

Values can be overridden via environment variables prefixed with
``PINSYNC_``. For example, ``PINSYNC_MAX_WORKERS=4`` or
``PINSYNC_REGISTRY_URL=https://mirror.example/pypi/{name}/json``.
"""

from __future__ import annotations

import pydantic
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pinsync.errors import ConfigurationError
from pinsync.validation import SanitizationError, sanitize_positive_int

DEFAULT_REQUIREMENTS_FILE = "requirements.txt"
DEFAULT_REGISTRY_URL = "https://pypi.org/pypi/{name}/json"
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_MAX_WORKERS = 10
MAX_WORKERS_LIMIT = 64
DEFAULT_INSTALLER = "pip"
DEFAULT_USER_AGENT = "pinsync"


class Settings(BaseSettings):
    """Environment-driven defaults for the CLI and registry clients."""

    model_config = SettingsConfigDict(env_prefix="PINSYNC_")

    requirements_file: str = DEFAULT_REQUIREMENTS_FILE
    registry_url: str = DEFAULT_REGISTRY_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    max_workers: int = DEFAULT_MAX_WORKERS
    installer: str = DEFAULT_INSTALLER
    user_agent: str = DEFAULT_USER_AGENT

    @field_validator("registry_url")
    @classmethod
    def _valid_url_template(cls, value: str) -> str:
        if "{name}" not in value:
            raise ValueError("registry_url must contain a '{name}' placeholder")
        try:
            value.format(name="pinsync")
        except (KeyError, IndexError, ValueError) as exc:
            raise ValueError(
                f"registry_url may only use the '{{name}}' placeholder ({exc!r})"
            ) from None
        return value

    @field_validator("request_timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("request_timeout must be positive")
        return value

    @field_validator("max_workers")
    @classmethod
    def _bounded_workers(cls, value: int) -> int:
        try:
            return sanitize_positive_int(value, field="max_workers", maximum=MAX_WORKERS_LIMIT)
        except SanitizationError as exc:
            raise ValueError(exc.user_message) from None


def get_settings() -> Settings:
    """Load settings from the environment, raising :class:`ConfigurationError`."""

    try:
        return Settings()
    except pydantic.ValidationError as exc:
        raise ConfigurationError(
            "Invalid PINSYNC_* configuration",
            user_message=f"Invalid configuration: {exc.error_count()} error(s) in PINSYNC_* settings",
            cause=exc,
        ) from exc


__all__ = [
    "DEFAULT_INSTALLER",
    "DEFAULT_MAX_WORKERS",
    "DEFAULT_REGISTRY_URL",
    "DEFAULT_REQUEST_TIMEOUT",
    "DEFAULT_REQUIREMENTS_FILE",
    "DEFAULT_USER_AGENT",
    "MAX_WORKERS_LIMIT",
    "Settings",
    "get_settings",
]
