"""CLI commands for db-cli.

The CLI is built using Click with the entry point ``db-cli``. Each command
creates the process's ``ProfileStore``, awaits ``init()`` and then performs a
single operation.

Key Commands:
    list / add / show / edit / remove / verbose (db_cli.cli.connections):
        Manage saved connection profiles.

    export / import (db_cli.cli.transfer):
        Back up and restore profiles, optionally sealed with a password.
"""

from db_cli.cli.connections import (
    add_connection,
    edit_connection,
    list_connections,
    remove_connection,
    show_connection,
    toggle_verbose,
)
from db_cli.cli.transfer import export_connections, import_connections

__all__ = [
    "add_connection",
    "edit_connection",
    "export_connections",
    "import_connections",
    "list_connections",
    "remove_connection",
    "show_connection",
    "toggle_verbose",
]
