"""Settings for db-cli."""

from db_cli.config.settings import DEFAULT_CONFIG_PATH, DEFAULT_SETTINGS_FILE, DbCliSettings

__all__ = ["DEFAULT_CONFIG_PATH", "DEFAULT_SETTINGS_FILE", "DbCliSettings"]
