"""Enumerations for db-cli profile types."""

from enum import Enum


class DatabaseType(str, Enum):
    """Database engines a connection profile can target.

    The value selects which external client adapter drives the profile.
    """

    POSTGRES = "postgres"

    def __str__(self) -> str:
        return self.value
