"""Shared state and helpers for db-cli commands."""

import asyncio
import sys
from collections.abc import Coroutine
from dataclasses import dataclass
from typing import Any, NoReturn, TypeVar

import click
import structlog

from db_cli.config.settings import DbCliSettings
from db_cli.core.profile_store import ProfileStore
from db_cli.core.transfer import ProfileTransfer
from db_cli.credentials import KeyringVault, MemoryVault, SecretVault
from db_cli.exceptions import DbCliError

log = structlog.get_logger(__name__)

T = TypeVar("T")


def create_vault(settings: DbCliSettings) -> SecretVault:
    """Pick the secret vault for the configured environment."""
    if not settings.use_keyring:
        return MemoryVault()

    vault = KeyringVault(settings.keyring_service)
    if not vault.available:
        log.warning("keyring_not_available", service=settings.keyring_service)
    return vault


@dataclass
class AppContext:
    """Per-invocation state passed to every command via ``click.pass_obj``."""

    settings: DbCliSettings

    async def open_store(self) -> ProfileStore:
        """Create the process's profile store and load it."""
        store = ProfileStore(self.settings.config_path, create_vault(self.settings))
        await store.init()
        return store

    async def open_transfer(self) -> ProfileTransfer:
        return ProfileTransfer(await self.open_store())


def fail(error: DbCliError) -> NoReturn:
    """Print a db-cli error with its suggestion and exit with status 1."""
    click.echo(click.style(f"Error: {error.message}", fg="red"), err=True)
    if error.suggestion:
        click.echo(click.style(f"Suggestion: {error.suggestion}", fg="yellow"), err=True)
    log.debug("command_failed", error=error.message, exc_info=True)
    sys.exit(1)


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run a command's coroutine, mapping db-cli errors and Ctrl-C to exit codes.

    DbCliError exits with status 1, KeyboardInterrupt with status 130.
    """
    try:
        return asyncio.run(coro)
    except DbCliError as e:
        fail(e)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)


def mask(secret: str) -> str:
    """Mask a secret for display, keeping only its length visible."""
    return "*" * len(secret) if secret else "(none)"
