"""Protocol for secret vaults that hold profile passwords."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class SecretVault(Protocol):
    """Interface every secret vault implements.

    Entries are scoped to the vault's service name and addressed by account,
    which is always a connection profile id.

    Vault operations are best-effort. An unavailable vault is a supported
    state, not an error: ``store`` and ``delete`` return False and
    ``retrieve`` returns None. Implementations must never raise.
    """

    @property
    def name(self) -> str:
        """Vault identifier (e.g., 'keyring', 'memory')."""
        ...

    @property
    def available(self) -> bool:
        """Check if the vault can be used on the current system."""
        ...

    def store(self, account: str, secret: str) -> bool:
        """Save a secret.

        Args:
            account: Profile id
            secret: Secret value

        Returns:
            True if the secret was saved
        """
        ...

    def retrieve(self, account: str) -> str | None:
        """Look up a secret.

        Args:
            account: Profile id

        Returns:
            Secret value or None if absent or the vault is unavailable
        """
        ...

    def delete(self, account: str) -> bool:
        """Remove a secret.

        Args:
            account: Profile id

        Returns:
            True if an entry was deleted
        """
        ...
