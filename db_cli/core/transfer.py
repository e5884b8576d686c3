"""Portable export and import of connection profiles.

Export File Formats:
    Plain JSON envelope::

        {"version": 1, "exportedAt": "...", "connections": [...]}

    The same JSON sealed with a password (see ``db_cli.credentials.crypto``)::

        ENC:<salt>:<iv>:<ciphertext>

    Import detects the format from the content, never from the extension.

Password Policy:
    - Sealed exports keep profile passwords; the envelope protects them.
    - Plain exports strip passwords unless the operator explicitly asks for
      them. Sealing and plain passwords are never combined.

Merge Policy:
    Imported profiles are matched by id. Ids already in the store are skipped
    without touching the existing profile.
"""

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import structlog

from db_cli.core.profile_store import ProfileStore
from db_cli.credentials.crypto import is_sealed, seal, unseal
from db_cli.exceptions import (
    DecryptionError,
    EncryptedFileError,
    FormatError,
    TransferError,
    ValidationError,
)
from db_cli.models.profile import (
    EXPORT_FORMAT_VERSION,
    ConnectionProfile,
    ExportEnvelope,
    validate_profiles,
)
from db_cli.utils.files import read_text, write_private_file

log = structlog.get_logger(__name__)

ENCRYPTED_SUFFIX = ".enc"


def ensure_encrypted_suffix(path: str | Path) -> Path:
    """Append ``.enc`` to a path unless it already ends with it."""
    path = Path(path)
    if path.suffix == ENCRYPTED_SUFFIX:
        return path
    return path.with_name(f"{path.name}{ENCRYPTED_SUFFIX}")


def _connections_from(document: Any) -> Any:
    """Pull the profile list out of an export envelope or a bare list."""
    if isinstance(document, list):
        return document

    if not isinstance(document, dict):
        raise ValidationError("Import file does not contain a list of connections")

    version = document.get("version", EXPORT_FORMAT_VERSION)
    if isinstance(version, int) and version > EXPORT_FORMAT_VERSION:
        raise FormatError(
            f"Unsupported export version: {version}",
            suggestion="Upgrade db-cli to import this file",
        )

    connections = document.get("connections")
    if connections is None:
        raise ValidationError("Import file does not contain a list of connections")
    return connections


class ProfileTransfer:
    """Export and import the profile set of a ``ProfileStore``.

    Example:
        >>> transfer = ProfileTransfer(store)
        >>> await transfer.export_to_file("backup.enc", password="hunter2")
        3
        >>> await transfer.import_from_file("backup.enc", password="hunter2")
        0
    """

    def __init__(self, store: ProfileStore) -> None:
        self.store = store

    def build_envelope(
        self,
        *,
        keep_passwords: bool,
        exported_at: datetime | None = None,
    ) -> ExportEnvelope:
        """Snapshot the store into an export envelope."""
        connections = [
            profile.model_copy() if keep_passwords else profile.without_password()
            for profile in self.store.list_profiles()
        ]
        return ExportEnvelope(
            exported_at=exported_at or datetime.now(UTC),
            connections=connections,
        )

    async def export_to_file(
        self,
        path: str | Path,
        password: str | None = None,
        include_plain_passwords: bool = False,
    ) -> int:
        """Write all profiles to a portable file.

        Args:
            path: Destination file, written with mode 0600
            password: Seal the export with this password
            include_plain_passwords: Keep passwords in an unsealed export

        Returns:
            Number of exported profiles

        Raises:
            ValueError: If both a password and plain passwords are requested
            TransferError: If the file cannot be written
        """
        if password and include_plain_passwords:
            raise ValueError("Encrypted exports cannot also include plain-text passwords")

        envelope = self.build_envelope(keep_passwords=bool(password) or include_plain_passwords)
        content = envelope.to_json()
        if password:
            content = seal(content, password)

        try:
            await write_private_file(path, content)
        except OSError as e:
            raise TransferError(f"Cannot write export file {path}: {e}") from e

        count = len(envelope.connections)
        log.info(
            "profiles_exported",
            path=str(path),
            count=count,
            encrypted=bool(password),
            plain_passwords=include_plain_passwords,
        )
        return count

    def parse(self, content: str, password: str | None = None) -> list[ConnectionProfile]:
        """Turn export file content into validated profiles.

        Plain JSON is tried first. Content that is not JSON is unsealed when a
        password is given.

        Raises:
            EncryptedFileError: If the content is sealed and no password was given
            FormatError: If the content is neither JSON nor a sealed envelope
            DecryptionError: If unsealing fails
            ValidationError: If any profile in the batch is invalid
        """
        try:
            document = json.loads(content)
        except json.JSONDecodeError as e:
            if password:
                try:
                    document = json.loads(unseal(content, password))
                except (FormatError, DecryptionError, json.JSONDecodeError) as err:
                    raise DecryptionError(
                        "Invalid password or corrupted file",
                        suggestion="Re-enter the password used for the export",
                    ) from err
            elif is_sealed(content):
                raise EncryptedFileError(suggestion="Provide the export password") from e
            else:
                raise FormatError(f"Import file is not valid JSON: {e}") from e

        return validate_profiles(_connections_from(document))

    @staticmethod
    async def _read(path: str | Path) -> str:
        try:
            return await read_text(path)
        except (OSError, UnicodeDecodeError) as e:
            raise TransferError(f"Cannot read import file {path}: {e}") from e

    async def is_sealed_file(self, path: str | Path) -> bool:
        """Check whether an export file is sealed with a password.

        Raises:
            TransferError: If the file cannot be read
        """
        return is_sealed(await self._read(path))

    async def import_from_file(self, path: str | Path, password: str | None = None) -> int:
        """Merge profiles from an export file into the store.

        Args:
            path: Export file, plain or sealed
            password: Password for sealed files

        Returns:
            Number of newly added profiles; zero when every id already exists

        Raises:
            TransferError: If the file cannot be read
            EncryptedFileError: If the file is sealed and no password was given
            FormatError: If the file is not a recognized export
            DecryptionError: If the password is wrong or the file is corrupted
            ValidationError: If any profile in the file is invalid
        """
        profiles = self.parse(await self._read(path), password)
        added = await self.store.merge(profiles)

        log.info("profiles_imported", path=str(path), found=len(profiles), added=added)
        return added
