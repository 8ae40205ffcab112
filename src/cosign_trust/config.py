"""
Configuration settings for cosign-trust.

Settings come from COSIGN_TRUST_* environment variables (or a .env file) and
can be overridden by a YAML file passed to load_settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError
from .logging_config import LOG_LEVELS, LOG_OFF_LEVEL


class Settings(BaseSettings):
    """Settings for cosign-trust"""

    model_config = SettingsConfigDict(
        env_prefix="COSIGN_TRUST_", env_file=".env", extra="ignore", case_sensitive=False
    )

    SERVICE_NAME: str = "cosign-trust"
    ENVIRONMENT: str = "development"

    # Logging configuration
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["text", "json"] = "text"

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS and level != LOG_OFF_LEVEL:
            msg = f"Unknown log level {v!r}; expected one of {[*LOG_LEVELS, LOG_OFF_LEVEL]}"
            raise ValueError(msg)
        return level

    @property
    def json_logs(self) -> bool:
        return self.LOG_FORMAT == "json"


def _load_yaml(config_path: Path) -> dict[str, Any]:
    try:
        with config_path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        msg = f"Cannot read configuration file {config_path}: {e}"
        raise ConfigurationError(msg) from e
    except yaml.YAMLError as e:
        msg = f"Invalid YAML in configuration file {config_path}: {e}"
        raise ConfigurationError(msg) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Configuration file {config_path} must contain a mapping"
        raise ConfigurationError(msg)
    return {str(key).upper(): value for key, value in data.items()}


def load_settings(config_path: str | Path | None = None) -> Settings:
    """
    Load settings from the environment, overlaid with an optional YAML file.

    Raises:
        ConfigurationError: If the file cannot be read or a value is invalid
    """
    overrides = _load_yaml(Path(config_path)) if config_path else {}
    try:
        return Settings(**overrides)
    except ValidationError as e:
        msg = f"Invalid configuration: {e}"
        raise ConfigurationError(msg) from e

