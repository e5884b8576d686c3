"""Process-local vault used when the OS keyring is switched off."""

import structlog

log = structlog.get_logger(__name__)


class MemoryVault:
    """Dict-backed secret vault.

    Secrets live only as long as the process. Useful on hosts without a
    keyring (set ``DB_CLI_USE_KEYRING=false``) and in tests.

    Example:
        >>> vault = MemoryVault()
        >>> vault.store("profile-1", "s3cr3t")
        True
        >>> vault.retrieve("profile-1")
        's3cr3t'
    """

    def __init__(self, secrets: dict[str, str] | None = None) -> None:
        self._secrets: dict[str, str] = dict(secrets or {})

    @property
    def name(self) -> str:
        return "memory"

    @property
    def available(self) -> bool:
        return True

    def store(self, account: str, secret: str) -> bool:
        if not secret:
            return False
        self._secrets[account] = secret
        log.debug("vault_secret_stored", vault=self.name, account=account)
        return True

    def retrieve(self, account: str) -> str | None:
        return self._secrets.get(account)

    def delete(self, account: str) -> bool:
        return self._secrets.pop(account, None) is not None

    def __contains__(self, account: str) -> bool:
        return account in self._secrets
