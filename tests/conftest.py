"""Pytest configuration and shared fixtures."""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio

from db_cli.core.profile_store import ProfileStore
from db_cli.core.transfer import ProfileTransfer
from db_cli.credentials import MemoryVault
from db_cli.models.profile import ConnectionProfile

ProfileFactory = Callable[..., ConnectionProfile]


class UnavailableVault:
    """Vault that behaves like a host without secret storage."""

    name = "unavailable"
    available = False

    def store(self, account: str, secret: str) -> bool:
        return False

    def retrieve(self, account: str) -> str | None:
        return None

    def delete(self, account: str) -> bool:
        return False


@pytest.fixture
def make_profile() -> ProfileFactory:
    """Factory for valid connection profiles."""
    counter = {"n": 0}

    def _make(**overrides: Any) -> ConnectionProfile:
        counter["n"] += 1
        data: dict[str, Any] = {
            "id": f"profile-{counter['n']}",
            "name": "Test Connection",
            "type": "postgres",
            "host": "localhost",
            "port": 5432,
            "user": "postgres",
            "password": "secret",
            "database": "testdb",
            "ssl": False,
            "verbose": False,
        }
        data.update(overrides)
        return ConnectionProfile(**data)

    return _make


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """Metadata file location inside a temporary home."""
    return tmp_path / ".db-cli-config.json"


@pytest.fixture
def vault() -> MemoryVault:
    return MemoryVault()


@pytest_asyncio.fixture
async def store(config_path: Path, vault: MemoryVault) -> ProfileStore:
    """Initialized, empty profile store."""
    profile_store = ProfileStore(config_path, vault)
    await profile_store.init()
    return profile_store


@pytest.fixture
def transfer(store: ProfileStore) -> ProfileTransfer:
    return ProfileTransfer(store)


@pytest.fixture
def read_metadata(config_path: Path) -> Callable[[], list[dict[str, Any]]]:
    """Load the raw metadata file written by the store."""

    def _read() -> list[dict[str, Any]]:
        return json.loads(config_path.read_text(encoding="utf-8"))

    return _read


@pytest.fixture
def unavailable_vault() -> UnavailableVault:
    return UnavailableVault()
