"""
Configuration for db-cli using pydantic-settings.

Settings come from, in increasing priority:

1. Built-in defaults
2. ``DB_CLI_*`` environment variables
3. An optional YAML settings file (``~/.config/db-cli/settings.yaml`` or
   ``--settings PATH``)
4. Command-line options, applied by the CLI on top of the loaded settings

Example settings file::

    config_path: ~/work/.db-cli-config.json
    use_keyring: false
    log_level: INFO
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from db_cli.credentials.keyring_backend import DEFAULT_SERVICE_NAME
from db_cli.exceptions import ConfigurationError

DEFAULT_CONFIG_PATH = Path.home() / ".db-cli-config.json"
DEFAULT_SETTINGS_FILE = Path.home() / ".config" / "db-cli" / "settings.yaml"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class DbCliSettings(BaseSettings):
    """Runtime settings for the profile store and CLI."""

    model_config = SettingsConfigDict(
        env_prefix="DB_CLI_",
        case_sensitive=False,
        extra="ignore",
    )

    config_path: Path = Field(
        default=DEFAULT_CONFIG_PATH,
        description="Metadata file holding connection profiles (passwords blanked)",
    )
    keyring_service: str = Field(
        default=DEFAULT_SERVICE_NAME,
        description="Service name under which profile passwords are stored",
    )
    use_keyring: bool = Field(
        default=True,
        description="Store passwords in the OS keyring; false keeps them in memory only",
    )
    log_level: LogLevel = Field(default="WARNING", description="Minimum log level")
    json_logs: bool = Field(default=False, description="Emit logs as JSON lines")

    @field_validator("config_path", mode="after")
    @classmethod
    def _expand_user(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @classmethod
    def load(cls, settings_file: str | Path | None = None) -> DbCliSettings:
        """Load settings from environment variables and an optional YAML file.

        Args:
            settings_file: Explicit YAML file; when None the default location
                is used if it exists

        Returns:
            DbCliSettings instance

        Raises:
            ConfigurationError: If the file is unreadable or a value is invalid
        """
        if settings_file is None:
            if not DEFAULT_SETTINGS_FILE.exists():
                return cls._build({})
            settings_file = DEFAULT_SETTINGS_FILE

        return cls._build(cls._read_yaml(Path(settings_file)))

    @staticmethod
    def _read_yaml(path: Path) -> dict[str, object]:
        if not path.exists():
            raise ConfigurationError(f"Settings file not found: {path}")

        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigurationError(f"Cannot read settings file: {path}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError("Settings must be a YAML mapping, not a list or scalar")
        return data

    @classmethod
    def _build(cls, values: dict[str, object]) -> DbCliSettings:
        try:
            return cls(**values)
        except PydanticValidationError as e:
            raise ConfigurationError(f"Invalid settings: {e}") from e
