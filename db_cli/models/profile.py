"""Connection profile and export envelope models.

A ``ConnectionProfile`` is the only entity db-cli persists. Its metadata lives
in a JSON file under the operator's home directory while the password is kept
in the OS keyring, keyed by the profile ``id``.

An ``ExportEnvelope`` wraps a snapshot of all profiles for portable transfer::

    {
        "version": 1,
        "exportedAt": "2026-01-15T10:30:00Z",
        "connections": [ {...}, {...} ]
    }
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from db_cli.enums import DatabaseType
from db_cli.exceptions import ValidationError

EXPORT_FORMAT_VERSION = 1


def new_profile_id() -> str:
    """Generate an identifier for a newly created profile."""
    return str(uuid.uuid4())


class ConnectionProfile(BaseModel):
    """Named database connection configuration.

    ``password`` is secret material. It is held in memory after the keyring
    hydrates it but is always blanked before the profile reaches the
    metadata file.
    """

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    id: str = Field(..., description="Stable identifier, join key to the keyring entry")
    name: str = Field(..., description="Display label, not required to be unique")
    type: DatabaseType = Field(..., description="Adapter that handles this profile")
    host: str
    port: StrictInt
    user: str
    password: str = Field(default="", description="Secret, never written to the metadata file")
    database: str
    ssl: bool = False
    verbose: bool = Field(default=False, description="Show detailed client command output")
    group: str | None = Field(default=None, description="Free-text label used for grouping")

    @property
    def has_password(self) -> bool:
        return bool(self.password)

    def without_password(self) -> ConnectionProfile:
        """Return a copy whose password is blank."""
        return self.model_copy(update={"password": ""})

    def to_document(self) -> dict[str, Any]:
        """Return a JSON-ready dict; ``group`` is omitted when unset."""
        return self.model_dump(mode="json", exclude_none=True)


class ExportEnvelope(BaseModel):
    """Versioned wrapper around an exported profile snapshot."""

    model_config = ConfigDict(populate_by_name=True)

    version: int = EXPORT_FORMAT_VERSION
    exported_at: datetime = Field(default_factory=lambda: datetime.now(UTC), alias="exportedAt")
    connections: list[ConnectionProfile] = Field(default_factory=list)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2, exclude_none=True)


_PROFILE_LIST = TypeAdapter(list[ConnectionProfile])


def _describe(exc: PydanticValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error.get("loc", ())) or "profile"
    return f"{location}: {error.get('msg', 'Invalid value')}"


def validate_profile(data: ConnectionProfile | Mapping[str, Any]) -> ConnectionProfile:
    """Validate a single profile and return a fresh copy of it.

    Raises:
        ValidationError: If the data does not match the profile shape
    """
    if isinstance(data, ConnectionProfile):
        data = data.model_dump()
    try:
        return ConnectionProfile.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid connection profile: {_describe(e)}") from e


def validate_profiles(items: Iterable[Any] | Any) -> list[ConnectionProfile]:
    """Validate a whole batch of profiles.

    A single invalid entry rejects the batch.

    Raises:
        ValidationError: If the batch is not a list or any entry is invalid
    """
    try:
        return _PROFILE_LIST.validate_python(items)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid connection list: {_describe(e)}") from e
