"""Profile persistence and portable transfer."""

from db_cli.core.profile_store import ProfileStore
from db_cli.core.transfer import ProfileTransfer, ensure_encrypted_suffix

__all__ = ["ProfileStore", "ProfileTransfer", "ensure_encrypted_suffix"]
