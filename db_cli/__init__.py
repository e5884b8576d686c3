"""db-cli: connection profile manager with keyring-backed secrets and encrypted backups."""

__version__ = "0.1.0"
