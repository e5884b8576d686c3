"""Secret storage and password-based sealing for connection profiles.

Vaults:
    - KeyringVault: OS keyring (macOS Keychain, GNOME Keyring, Windows
      Credential Locker). The default.
    - MemoryVault: process-local storage for hosts without a keyring.

Codec:
    - seal / unseal: AES-256-CBC envelopes keyed by a PBKDF2-derived password.
"""

from db_cli.credentials.backend import SecretVault
from db_cli.credentials.crypto import SEALED_PREFIX, is_sealed, seal, unseal
from db_cli.credentials.keyring_backend import DEFAULT_SERVICE_NAME, KeyringVault
from db_cli.credentials.memory_backend import MemoryVault

__all__ = [
    "DEFAULT_SERVICE_NAME",
    "SEALED_PREFIX",
    "KeyringVault",
    "MemoryVault",
    "SecretVault",
    "is_sealed",
    "seal",
    "unseal",
]
