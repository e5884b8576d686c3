"""OS-level keyring vault for profile passwords.

Platform Support:
- Linux: Secret Service API (GNOME Keyring, KWallet)
- macOS: Keychain
- Windows: Windows Credential Locker

Entries are stored under a single service name (``db-cli`` by default) with
the connection profile id as the account.
"""

from typing import cast

import structlog

try:
    import keyring
    from keyring.backends.fail import Keyring as FailKeyring
    from keyring.errors import PasswordDeleteError

    KEYRING_AVAILABLE = True
except ImportError:
    KEYRING_AVAILABLE = False

log = structlog.get_logger(__name__)

DEFAULT_SERVICE_NAME = "db-cli"


class KeyringVault:
    """Secret vault backed by the system keyring.

    Every failure, including a missing or headless keyring, is reported
    through the return value and logged. Nothing is raised, so a broken
    keyring never blocks a profile operation.

    Example:
        >>> vault = KeyringVault()
        >>> vault.store("3f2a...", "s3cr3t")
        True
        >>> vault.retrieve("3f2a...")
        's3cr3t'
    """

    def __init__(self, service_name: str = DEFAULT_SERVICE_NAME) -> None:
        self.service_name = service_name

    @property
    def name(self) -> str:
        """Get vault identifier.

        Returns:
            Vault name constant "keyring"
        """
        return "keyring"

    @property
    def available(self) -> bool:
        """Check if a usable keyring is configured.

        Returns False if:
        - keyring package not installed
        - Only the fail backend is configured (headless systems)
        - Backend fails to initialize
        """
        if not KEYRING_AVAILABLE:
            return False

        try:
            backend = keyring.get_keyring()
        except Exception as e:
            log.debug("keyring_unavailable", error=str(e))
            return False

        return not isinstance(backend, FailKeyring)

    def store(self, account: str, secret: str) -> bool:
        """Save a profile password in the keyring.

        Args:
            account: Profile id
            secret: Password to store

        Returns:
            True if stored, False if the secret is empty or the keyring failed
        """
        if not secret or not self.available:
            return False

        try:
            keyring.set_password(self.service_name, account, secret)
        except Exception as e:
            log.warning("keyring_store_failed", account=account, error=str(e))
            return False

        log.debug("keyring_secret_stored", account=account)
        return True

    def retrieve(self, account: str) -> str | None:
        """Look up a profile password.

        Args:
            account: Profile id

        Returns:
            Password or None if absent or the keyring failed
        """
        if not self.available:
            return None

        try:
            secret = cast(str | None, keyring.get_password(self.service_name, account))
        except Exception as e:
            log.warning("keyring_retrieve_failed", account=account, error=str(e))
            return None

        return secret or None

    def delete(self, account: str) -> bool:
        """Remove a profile password.

        Args:
            account: Profile id

        Returns:
            True if deleted, False if not found or the keyring failed
        """
        if not self.available:
            return False

        try:
            keyring.delete_password(self.service_name, account)
        except PasswordDeleteError:
            # Nothing stored for this profile
            return False
        except Exception as e:
            log.warning("keyring_delete_failed", account=account, error=str(e))
            return False

        log.debug("keyring_secret_deleted", account=account)
        return True
