"""Data models for db-cli."""

from db_cli.models.profile import (
    EXPORT_FORMAT_VERSION,
    ConnectionProfile,
    ExportEnvelope,
    new_profile_id,
    validate_profile,
    validate_profiles,
)

__all__ = [
    "EXPORT_FORMAT_VERSION",
    "ConnectionProfile",
    "ExportEnvelope",
    "new_profile_id",
    "validate_profile",
    "validate_profiles",
]
