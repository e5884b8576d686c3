"""Tests for db_cli/core/profile_store.py."""

import json
import os
import stat
from pathlib import Path
from unittest.mock import patch

import pytest

from db_cli.core.profile_store import ProfileStore
from db_cli.credentials import MemoryVault
from db_cli.exceptions import ValidationError


class TestProfileStoreInit:
    """Tests for loading the metadata file."""

    @pytest.mark.asyncio
    async def test_missing_file_loads_empty(self, config_path: Path, vault):
        """Test a first run without a metadata file."""
        store = ProfileStore(config_path, vault)
        await store.init()

        assert store.list_profiles() == []
        assert not config_path.exists()

    @pytest.mark.asyncio
    async def test_corrupt_file_loads_empty(self, config_path: Path, vault):
        """Test unparseable JSON is treated as no profiles."""
        config_path.write_text("{not json")

        store = ProfileStore(config_path, vault)
        await store.init()

        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_invalid_entries_load_empty(self, config_path: Path, vault):
        """Test a file with a malformed profile is treated as no profiles."""
        config_path.write_text(json.dumps([{"id": "a", "name": "broken"}]))

        store = ProfileStore(config_path, vault)
        await store.init()

        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_passwords_hydrated_from_vault(self, config_path: Path, make_profile):
        """Test blanked passwords are filled in from the vault."""
        first = make_profile(password="")
        second = make_profile(password="")
        config_path.write_text(json.dumps([first.to_document(), second.to_document()]))
        vault = MemoryVault({first.id: "from-vault"})

        store = ProfileStore(config_path, vault)
        await store.init()

        assert store.get(first.id).password == "from-vault"
        assert store.get(second.id).password == ""

    @pytest.mark.asyncio
    async def test_hydration_keeps_file_password_when_vault_empty(
        self, config_path: Path, make_profile, unavailable_vault
    ):
        """Test a legacy file password survives when the vault has nothing."""
        legacy = make_profile(password="legacy")
        config_path.write_text(json.dumps([legacy.to_document()]))

        store = ProfileStore(config_path, unavailable_vault)
        await store.init()

        assert store.get(legacy.id).password == "legacy"

    def test_expands_user_in_path(self, vault):
        store = ProfileStore("~/.db-cli-config.json", vault)

        assert "~" not in str(store.config_path)


class TestProfileStoreAdd:
    """Tests for adding profiles."""

    @pytest.mark.asyncio
    async def test_add_then_get(self, store: ProfileStore, make_profile):
        """Test an added profile is returned with its password."""
        profile = make_profile(password="s3cr3t")

        await store.add(profile)

        assert store.get(profile.id).password == "s3cr3t"
        assert store.list_profiles()[-1].id == profile.id

    @pytest.mark.asyncio
    async def test_add_accepts_mapping(self, store: ProfileStore, make_profile):
        data = make_profile().model_dump()

        added = await store.add(data)

        assert added.id == data["id"]
        assert data["id"] in store

    @pytest.mark.asyncio
    async def test_metadata_never_contains_password(
        self, store: ProfileStore, make_profile, read_metadata
    ):
        """Test the metadata file holds a blank password."""
        profile = make_profile(password="s3cr3t")

        await store.add(profile)

        documents = read_metadata()
        assert documents[0]["password"] == ""
        assert "s3cr3t" not in store.config_path.read_text()

    @pytest.mark.asyncio
    async def test_password_goes_to_vault(self, store: ProfileStore, vault, make_profile):
        profile = make_profile(password="s3cr3t")

        await store.add(profile)

        assert vault.retrieve(profile.id) == "s3cr3t"

    @pytest.mark.asyncio
    async def test_empty_password_not_sent_to_vault(self, store: ProfileStore, vault, make_profile):
        profile = make_profile(password="")

        await store.add(profile)

        assert profile.id not in vault

    @pytest.mark.asyncio
    async def test_invalid_profile_changes_nothing(
        self, store: ProfileStore, vault, make_profile, config_path: Path
    ):
        """Test a rejected add leaves memory, disk and vault untouched."""
        data = make_profile().model_dump()
        data["port"] = "not-a-port"

        with pytest.raises(ValidationError):
            await store.add(data)

        assert len(store) == 0
        assert not config_path.exists()
        assert data["id"] not in vault

    @pytest.mark.asyncio
    async def test_file_is_owner_only(self, store: ProfileStore, make_profile, config_path: Path):
        """Test the metadata file is written with mode 0600."""
        await store.add(make_profile())

        assert stat.S_IMODE(os.stat(config_path).st_mode) == 0o600

    @pytest.mark.asyncio
    async def test_unavailable_vault_keeps_password_in_memory(
        self, config_path: Path, make_profile, unavailable_vault, read_metadata
    ):
        """Test adding still succeeds when secret storage is missing."""
        store = ProfileStore(config_path, unavailable_vault)
        await store.init()
        profile = make_profile(password="s3cr3t")

        await store.add(profile)

        assert store.get(profile.id).password == "s3cr3t"
        assert read_metadata()[0]["password"] == ""

    @pytest.mark.asyncio
    async def test_persist_failure_keeps_change_in_memory(self, store: ProfileStore, make_profile):
        """Test a failed write is logged and the profile stays visible."""
        profile = make_profile()

        with patch(
            "db_cli.core.profile_store.write_private_file", side_effect=OSError("disk full")
        ):
            await store.add(profile)

        assert profile.id in store

    @pytest.mark.asyncio
    async def test_round_trip_through_new_store(
        self, store: ProfileStore, vault, make_profile, config_path: Path
    ):
        """Test a fresh store sees what a previous one saved."""
        profile = make_profile(group="prod", ssl=True)
        await store.add(profile)

        reloaded = ProfileStore(config_path, vault)
        await reloaded.init()

        assert reloaded.get(profile.id) == profile


class TestProfileStoreUpdate:
    """Tests for updating profiles."""

    @pytest.mark.asyncio
    async def test_update_replaces_in_place(self, store: ProfileStore, make_profile):
        """Test update keeps the profile's position."""
        first, second, third = make_profile(), make_profile(), make_profile()
        for profile in (first, second, third):
            await store.add(profile)

        updated = await store.update(second.model_copy(update={"name": "Renamed"}))

        assert updated is True
        assert [p.id for p in store.list_profiles()] == [first.id, second.id, third.id]
        assert store.get(second.id).name == "Renamed"

    @pytest.mark.asyncio
    async def test_update_unknown_id_returns_false(
        self, store: ProfileStore, make_profile, config_path: Path
    ):
        """Test updating a missing profile is a no-op."""
        updated = await store.update(make_profile())

        assert updated is False
        assert len(store) == 0
        assert not config_path.exists()

    @pytest.mark.asyncio
    async def test_update_stores_new_password(
        self, store: ProfileStore, vault, make_profile, read_metadata
    ):
        """Test a new password goes to the vault and never to the metadata file."""
        profile = make_profile(password="old")
        await store.add(profile)

        await store.update(profile.model_copy(update={"password": "new"}))

        assert vault.retrieve(profile.id) == "new"
        assert store.get(profile.id).password == "new"
        assert read_metadata()[0]["password"] == ""
        assert "new" not in {d["password"] for d in read_metadata()}

    @pytest.mark.asyncio
    async def test_clearing_password_removes_vault_entry(
        self, store: ProfileStore, vault, make_profile, config_path: Path
    ):
        """Test an emptied password stays empty after the store is reloaded."""
        profile = make_profile(password="old")
        await store.add(profile)

        await store.update(profile.model_copy(update={"password": ""}))

        assert profile.id not in vault
        reloaded = ProfileStore(config_path, vault)
        await reloaded.init()
        assert reloaded.get(profile.id).password == ""

    @pytest.mark.asyncio
    async def test_update_without_password_change_keeps_vault_entry(
        self, store: ProfileStore, vault, make_profile
    ):
        profile = make_profile(password="keep")
        await store.add(profile)

        await store.update(profile.model_copy(update={"name": "Renamed"}))

        assert vault.retrieve(profile.id) == "keep"
        assert store.get(profile.id).name == "Renamed"

    @pytest.mark.asyncio
    async def test_metadata_blank_after_add_update_remove_sequence(
        self, store: ProfileStore, make_profile, read_metadata
    ):
        """Test no sequence of mutations leaks a password into the metadata file."""
        first = make_profile(password="one")
        second = make_profile(password="two")
        await store.add(first)
        await store.add(second)
        await store.update(first.model_copy(update={"password": "uno"}))
        await store.remove(second.id)
        await store.update(first.model_copy(update={"port": 6543, "password": "eins"}))

        documents = read_metadata()
        assert [d["id"] for d in documents] == [first.id]
        assert all(d["password"] == "" for d in documents)

    @pytest.mark.asyncio
    async def test_update_invalid_raises(self, store: ProfileStore, make_profile):
        profile = make_profile()
        await store.add(profile)
        data = profile.model_dump()
        data["port"] = 5.5

        with pytest.raises(ValidationError):
            await store.update(data)

        assert store.get(profile.id).port == 5432


class TestProfileStoreRemove:
    """Tests for removing profiles."""

    @pytest.mark.asyncio
    async def test_remove_deletes_profile_and_secret(
        self, store: ProfileStore, vault, make_profile, read_metadata
    ):
        profile = make_profile()
        keep = make_profile()
        await store.add(profile)
        await store.add(keep)

        removed = await store.remove(profile.id)

        assert removed is True
        assert store.get(profile.id) is None
        assert profile.id not in vault
        assert [d["id"] for d in read_metadata()] == [keep.id]

    @pytest.mark.asyncio
    async def test_remove_unknown_returns_false(self, store: ProfileStore, make_profile):
        profile = make_profile()
        await store.add(profile)

        assert await store.remove("does-not-exist") is False
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_remove_with_unavailable_vault(
        self, config_path: Path, make_profile, unavailable_vault
    ):
        """Test removal succeeds even when the vault cannot delete."""
        store = ProfileStore(config_path, unavailable_vault)
        await store.init()
        profile = make_profile()
        await store.add(profile)

        assert await store.remove(profile.id) is True
        assert len(store) == 0


class TestProfileStoreMerge:
    """Tests for merging imported profiles."""

    @pytest.mark.asyncio
    async def test_merge_skips_existing_ids(self, store: ProfileStore, make_profile):
        """Test existing profiles are never overwritten."""
        existing = make_profile(name="Original")
        await store.add(existing)
        incoming = [existing.model_copy(update={"name": "Imported"}), make_profile()]

        added = await store.merge(incoming)

        assert added == 1
        assert store.get(existing.id).name == "Original"
        assert len(store) == 2

    @pytest.mark.asyncio
    async def test_merge_skips_duplicates_within_batch(self, store: ProfileStore, make_profile):
        profile = make_profile()

        added = await store.merge([profile, profile.model_copy(update={"name": "Dup"})])

        assert added == 1
        assert store.get(profile.id).name == profile.name

    @pytest.mark.asyncio
    async def test_merge_seeds_passwords(
        self, store: ProfileStore, vault, make_profile, read_metadata
    ):
        """Test merged passwords reach the vault but not the metadata file."""
        profile = make_profile(password="imported")

        await store.merge([profile, make_profile(password="also-imported")])

        assert vault.retrieve(profile.id) == "imported"
        assert [d["password"] for d in read_metadata()] == ["", ""]

    @pytest.mark.asyncio
    async def test_merge_nothing_new_does_not_write(
        self, store: ProfileStore, make_profile, config_path: Path
    ):
        """Test a merge that adds nothing leaves the file alone."""
        profile = make_profile()
        await store.add(profile)
        before = config_path.stat().st_mtime_ns

        with patch("db_cli.core.profile_store.write_private_file") as mock_write:
            added = await store.merge([profile])

        assert added == 0
        mock_write.assert_not_called()
        assert config_path.stat().st_mtime_ns == before


class TestSetVerboseAll:
    """Tests for the bulk verbose toggle."""

    @pytest.mark.asyncio
    async def test_sets_flag_on_every_profile(self, store: ProfileStore, make_profile, read_metadata):
        for _ in range(3):
            await store.add(make_profile(verbose=False))

        updated = await store.set_verbose_all(True)

        assert updated == 3
        assert all(p.verbose for p in store.list_profiles())
        assert all(d["verbose"] for d in read_metadata())

    @pytest.mark.asyncio
    async def test_empty_store(self, store: ProfileStore):
        assert await store.set_verbose_all(True) == 0
