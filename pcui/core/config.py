"""
Configuration Management.

Loads settings from config/settings/*.yaml and proxy settings from the
process environment. Paths, timeouts and limits come from these sources.

Settings (YAML):
    application.yaml   - Identity, HTTP timeout, history, operation log, downloads
    logging.yaml       - Logging configuration

Environment:
    HTTP_PROXY, http_proxy, HTTP_proxy - outbound proxy (last one present wins)
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from pcui.core.config_schema import ApplicationSchema, LoggingSchema


def find_project_root() -> Path:
    """Find project root by looking for .project_root marker file."""
    current = Path.cwd()
    while current != current.parent:
        if (current / ".project_root").exists():
            return current
        current = current.parent
    raise RuntimeError("Project root not found. Ensure .project_root file exists.")


def validate_project_root() -> Path:
    """
    Validate that the project root can be found.

    Raises SystemExit with a clear message if .project_root is not found.
    Use this in entry scripts before any configuration loading.
    """
    try:
        return find_project_root()
    except RuntimeError as e:
        raise SystemExit(f"Error: {e}") from e


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Load a YAML configuration file from config/settings/."""
    project_root = find_project_root()
    config_path = project_root / "config" / "settings" / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


def resolve_project_path(configured_path: str) -> Path:
    """Resolve a configured path against the project root unless it is absolute."""
    path = Path(configured_path)
    if path.is_absolute():
        return path
    return find_project_root() / path


class ProxySettings(BaseSettings):
    """
    Outbound proxy read from the environment.

    The three spellings are looked up case-sensitively. When several are
    set, HTTP_proxy beats http_proxy, which beats HTTP_PROXY.
    """

    http_proxy_upper: str | None = Field(default=None, validation_alias="HTTP_PROXY")
    http_proxy_lower: str | None = Field(default=None, validation_alias="http_proxy")
    http_proxy_mixed: str | None = Field(default=None, validation_alias="HTTP_proxy")

    model_config = SettingsConfigDict(
        case_sensitive=True,
        extra="ignore",
    )

    def resolve(self) -> str | None:
        """Return the effective proxy URL, or None when no proxy applies."""
        proxy: str | None = None
        for candidate in (self.http_proxy_upper, self.http_proxy_lower, self.http_proxy_mixed):
            if candidate is not None:
                proxy = candidate
        return proxy or None


def _load_validated(schema_cls: type, filename: str) -> Any:
    """Load YAML and validate against schema. Returns typed model instance."""
    raw = load_yaml_config(filename)
    try:
        return schema_cls(**raw)
    except ValidationError as e:
        raise ValueError(
            f"Invalid configuration in {filename}:\n{e}"
        ) from e


class AppConfig:
    """
    Application configuration loaded from YAML files.

    Each YAML file is validated against its Pydantic schema at load time.
    Properties return typed Pydantic model instances with attribute access.
    """

    def __init__(self) -> None:
        self._application = _load_validated(ApplicationSchema, "application.yaml")
        self._logging = _load_validated(LoggingSchema, "logging.yaml")

    @property
    def application(self) -> ApplicationSchema:
        """Application settings."""
        return self._application

    @property
    def logging(self) -> LoggingSchema:
        """Logging settings."""
        return self._logging


@lru_cache
def get_app_config() -> AppConfig:
    """Get cached application configuration."""
    return AppConfig()


def get_proxy() -> str | None:
    """
    Read the outbound proxy from the environment.

    Not cached: the environment is read at each login attempt.
    """
    return ProxySettings().resolve()
