"""Custom exception hierarchy for db-cli.

Every error raised on purpose by the profile store, the encryption codec and
the transfer protocol derives from ``DbCliError`` so the CLI can catch them
with a single except clause and print a friendly message.

Exception Hierarchy:
    DbCliError (base)
    ├── ConfigurationError
    ├── ValidationError
    ├── FormatError
    │   └── EncryptedFileError
    ├── DecryptionError
    └── TransferError

Secret vault failures are intentionally absent: the vault adapters report
unavailability through their return values and never raise.

Example Usage:
    >>> from db_cli.exceptions import EncryptedFileError
    >>> try:
    ...     await transfer.import_from_file(path)
    ... except EncryptedFileError:
    ...     password = click.prompt("Password", hide_input=True)
"""


class DbCliError(Exception):
    """Base exception for all db-cli errors.

    Attributes:
        message: Human-readable error description
        suggestion: Optional hint shown to the operator
    """

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        """Initialize exception.

        Args:
            message: Error message
            suggestion: Optional suggestion for resolution
        """
        self.suggestion = suggestion

        full_message = message
        if suggestion:
            full_message = f"{message}\nSuggestion: {suggestion}"

        super().__init__(full_message)
        self.message = message


class ConfigurationError(DbCliError):
    """Settings could not be loaded.

    Examples:
        - Settings file is not valid YAML
        - An environment override has the wrong type
    """

    pass


class ValidationError(DbCliError):
    """A connection profile, or a batch of them, does not match the profile shape.

    Raised before any state is mutated or persisted.
    """

    pass


class FormatError(DbCliError):
    """Content is not a recognized envelope or export document.

    Examples:
        - Sealed envelope without the ``ENC:`` prefix
        - Sealed envelope that does not split into salt, IV and ciphertext
        - Import file that is neither JSON nor a sealed envelope
    """

    pass


class EncryptedFileError(FormatError):
    """The import file is sealed and no password was supplied.

    Callers should prompt for the export password and retry.
    """

    def __init__(self, message: str = "File is encrypted", suggestion: str | None = None) -> None:
        super().__init__(message, suggestion)


class DecryptionError(DbCliError):
    """A sealed envelope could not be opened.

    A wrong password and corrupted ciphertext are reported the same way.
    """

    pass


class TransferError(DbCliError):
    """An export or import file could not be written or read."""

    pass
