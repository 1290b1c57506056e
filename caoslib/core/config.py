"""
Configuration Management.

Loads secrets from config/.env and settings from config/settings/*.yaml.

Secrets (.env, prefix CAOSDB_):
    CAOSDB_USERNAME, CAOSDB_PASSWORD, CAOSDB_PASSWORD_IDENTIFIER

Settings (YAML):
    connection.yaml - Server base URL, trust anchor, verbosity, request timeout
    logging.yaml    - Logging configuration

The client itself never requires these files: explicit constructor
arguments always work. The files are read when a caller asks for
configuration-driven defaults (CaosDBClient.from_config, setup_logging).
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from caoslib.core.config_schema import ConnectionSchema, LoggingSchema


def find_project_root() -> Path:
    """Find project root by looking for .project_root marker file."""
    current = Path.cwd()
    while current != current.parent:
        if (current / ".project_root").exists():
            return current
        current = current.parent
    raise RuntimeError("Project root not found. Ensure .project_root file exists.")


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Load a YAML configuration file from config/settings/."""
    project_root = find_project_root()
    config_path = project_root / "config" / "settings" / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


class Settings(BaseSettings):
    """Secrets loaded from config/.env or the environment. All optional."""

    username: str | None = None
    password: str | None = None
    password_identifier: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="CAOSDB_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


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
    Client configuration loaded from YAML files.

    Each YAML file is validated against its Pydantic schema at load time.
    Properties return typed Pydantic model instances with attribute access.
    """

    def __init__(self) -> None:
        self._connection = _load_validated(ConnectionSchema, "connection.yaml")
        self._logging = _load_validated(LoggingSchema, "logging.yaml")

    @property
    def connection(self) -> ConnectionSchema:
        """Server connection settings."""
        return self._connection

    @property
    def logging(self) -> LoggingSchema:
        """Logging settings."""
        return self._logging


@lru_cache
def get_settings() -> Settings:
    """Get cached secrets instance. Uses config/.env when a project root exists."""
    try:
        env_path = find_project_root() / "config" / ".env"
    except RuntimeError:
        return Settings()
    return Settings(_env_file=str(env_path))


@lru_cache
def get_app_config() -> AppConfig:
    """Get cached application configuration."""
    return AppConfig()


def get_connection_defaults() -> ConnectionSchema:
    """
    Get the configured server connection settings.

    Returns:
        ConnectionSchema from connection.yaml.
    """
    return get_app_config().connection
