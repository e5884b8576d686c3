"""
Connection profile store with split metadata/secret persistence.

This module provides the ProfileStore class, the single authoritative
in-memory collection of connection profiles for a db-cli process. Profile
metadata is written to a JSON file with every password blanked, while each
password is handed to a ``SecretVault`` keyed by the profile id.

Metadata File Structure:
    A JSON array of profiles, stored with mode 0600::

        [
            {
                "id": "3f2a6c1e-...",
                "name": "Local",
                "type": "postgres",
                "host": "localhost",
                "port": 5432,
                "user": "postgres",
                "password": "",
                "database": "app",
                "ssl": false,
                "verbose": false,
                "group": "dev"
            }
        ]

Lifecycle:
    The store is constructed explicitly and ``init()`` is awaited once before
    any other call. ``init()`` reads the metadata file synchronously and then
    looks up every password in the vault concurrently.

Failure Model:
    - A missing, unreadable or corrupt metadata file loads as an empty store.
    - Vault failures are logged and ignored.
    - Metadata write failures are logged; the in-memory change stays visible
      for the rest of the process but will not survive a restart.

Example:
    >>> store = ProfileStore(Path.home() / ".db-cli-config.json", KeyringVault())
    >>> await store.init()
    >>> await store.add(profile)
    >>> store.get(profile.id).password
    's3cr3t'
"""

import asyncio
import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import structlog

from db_cli.credentials.backend import SecretVault
from db_cli.exceptions import ValidationError
from db_cli.models.profile import ConnectionProfile, validate_profile, validate_profiles
from db_cli.utils.files import write_private_file

log = structlog.get_logger(__name__)

ProfileInput = ConnectionProfile | Mapping[str, Any]


class ProfileStore:
    """Own the connection profiles and keep disk and vault in sync.

    Attributes:
        config_path: Location of the metadata JSON file.
        vault: Secret vault holding profile passwords.

    Concurrency:
        Designed for a single asyncio task driving sequential calls. Each
        mutating call awaits its vault and file work in a fixed order before
        returning; only the hydration in ``init()`` runs lookups concurrently.
    """

    def __init__(self, config_path: str | Path, vault: SecretVault) -> None:
        self.config_path = Path(config_path).expanduser()
        self.vault = vault
        self._profiles: list[ConnectionProfile] = []

    async def init(self) -> None:
        """Load profile metadata and hydrate passwords from the vault."""
        self._load_metadata()
        await self._hydrate_passwords()

    def _load_metadata(self) -> None:
        """Read the metadata file, falling back to an empty collection."""
        if not self.config_path.exists():
            self._profiles = []
            return

        try:
            raw = json.loads(self.config_path.read_text(encoding="utf-8"))
            self._profiles = validate_profiles(raw)
        except (OSError, ValueError, ValidationError) as e:
            # ValueError covers JSONDecodeError and UnicodeDecodeError
            log.error("profile_config_load_failed", path=str(self.config_path), error=str(e))
            self._profiles = []
            return

        log.debug("profile_config_loaded", path=str(self.config_path), count=len(self._profiles))

    async def _hydrate_passwords(self) -> None:
        if not self._profiles:
            return

        secrets = await asyncio.gather(
            *(asyncio.to_thread(self.vault.retrieve, profile.id) for profile in self._profiles)
        )
        for profile, secret in zip(self._profiles, secrets, strict=True):
            if secret:
                profile.password = secret

    async def _persist(self) -> bool:
        """Write all profiles to the metadata file with blank passwords.

        Returns:
            True if the file was written
        """
        documents = [profile.without_password().to_document() for profile in self._profiles]
        try:
            await write_private_file(self.config_path, json.dumps(documents, indent=2))
        except OSError as e:
            log.error("profile_config_save_failed", path=str(self.config_path), error=str(e))
            return False
        return True

    async def _store_secret(self, profile: ConnectionProfile) -> None:
        if not profile.password:
            return
        stored = await asyncio.to_thread(self.vault.store, profile.id, profile.password)
        if not stored:
            log.warning("profile_password_not_stored", profile_id=profile.id, vault=self.vault.name)

    def get(self, profile_id: str) -> ConnectionProfile | None:
        """Return the profile with the given id, or None."""
        return next((p for p in self._profiles if p.id == profile_id), None)

    def list_profiles(self) -> list[ConnectionProfile]:
        """Return all profiles in insertion order."""
        return list(self._profiles)

    def __len__(self) -> int:
        return len(self._profiles)

    def __contains__(self, profile_id: object) -> bool:
        return any(p.id == profile_id for p in self._profiles)

    async def add(self, profile: ProfileInput) -> ConnectionProfile:
        """Validate and append a new profile.

        The password, if any, is offered to the vault before the profile is
        appended; a vault failure does not stop the add.

        Args:
            profile: Profile model or mapping of profile fields

        Returns:
            The stored profile

        Raises:
            ValidationError: If the profile is malformed; nothing is changed
        """
        try:
            validated = validate_profile(profile)
        except ValidationError as e:
            log.error("profile_invalid", error=e.message)
            raise

        await self._store_secret(validated)
        self._profiles.append(validated)
        await self._persist()

        log.info("profile_added", profile_id=validated.id)
        return validated

    async def update(self, profile: ProfileInput) -> bool:
        """Replace the profile with the same id, keeping its position.

        A non-empty password is written to the vault. Replacing a stored
        password with an empty one deletes the vault entry.

        Args:
            profile: Full replacement profile

        Returns:
            True if a profile was replaced, False if the id is unknown

        Raises:
            ValidationError: If the profile is malformed; nothing is changed
        """
        validated = validate_profile(profile)
        index = next((i for i, p in enumerate(self._profiles) if p.id == validated.id), None)
        if index is None:
            log.debug("profile_update_skipped", profile_id=validated.id)
            return False

        if self._profiles[index].has_password and not validated.has_password:
            # Cleared password; a stale vault entry would come back on the next init()
            await asyncio.to_thread(self.vault.delete, validated.id)
        else:
            await self._store_secret(validated)
        self._profiles[index] = validated
        await self._persist()

        log.info("profile_updated", profile_id=validated.id)
        return True

    async def remove(self, profile_id: str) -> bool:
        """Remove a profile and its stored password.

        The metadata file is rewritten before the vault entry is deleted so
        a vault failure cannot keep the profile on disk.

        Returns:
            True if a profile with that id existed
        """
        remaining = [p for p in self._profiles if p.id != profile_id]
        removed = len(remaining) != len(self._profiles)
        self._profiles = remaining

        await self._persist()
        await asyncio.to_thread(self.vault.delete, profile_id)

        if removed:
            log.info("profile_removed", profile_id=profile_id)
        return removed

    async def merge(self, profiles: Iterable[ConnectionProfile]) -> int:
        """Append profiles whose ids are not already present.

        Existing profiles are never overwritten. Passwords of new profiles
        are seeded into the vault exactly as ``add`` would. The metadata file
        is written once, and only if something was added.

        Args:
            profiles: Already validated profiles

        Returns:
            Number of profiles added
        """
        known = {p.id for p in self._profiles}
        added = 0

        for profile in profiles:
            if profile.id in known:
                log.debug("profile_merge_skipped", profile_id=profile.id)
                continue

            await self._store_secret(profile)
            self._profiles.append(profile)
            known.add(profile.id)
            added += 1

        if added:
            await self._persist()

        log.info("profiles_merged", added=added)
        return added

    async def set_verbose_all(self, verbose: bool) -> int:
        """Set the verbose flag on every profile.

        Returns:
            Number of profiles updated
        """
        updated = 0
        for profile in self.list_profiles():
            if await self.update(profile.model_copy(update={"verbose": verbose})):
                updated += 1
        return updated
