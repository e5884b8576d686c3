"""CLI commands for backing up and restoring connections.

Commands:
    - export: Write all connections to a portable file, sealed with a
      password by default
    - import: Merge connections from an export file; sealed files prompt for
      their password

Example:
    Move connections to another machine::

        $ db-cli export connections            # writes connections.enc
        $ db-cli import connections.enc        # prompts for the password
"""

from datetime import date
from pathlib import Path

import click

from db_cli.cli.context import AppContext, fail, run_async
from db_cli.core.transfer import ensure_encrypted_suffix
from db_cli.exceptions import EncryptedFileError


def _default_export_name() -> str:
    return f"db-cli-connections-{date.today().isoformat()}.json"


@click.command(name="export")
@click.argument("path", required=False, type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--encrypt/--no-encrypt",
    default=True,
    show_default=True,
    help="Seal the export with a password",
)
@click.option(
    "--password",
    envvar="DB_CLI_EXPORT_PASSWORD",
    help="Export password (prompted if omitted)",
)
@click.option(
    "--include-passwords",
    is_flag=True,
    help="Keep connection passwords in an unencrypted export (NOT RECOMMENDED)",
)
@click.option("--force", is_flag=True, help="Overwrite an existing file without asking")
@click.pass_obj
def export_connections(
    app: AppContext,
    path: Path | None,
    encrypt: bool,
    password: str | None,
    include_passwords: bool,
    force: bool,
) -> None:
    """Export all connections to PATH.

    Encrypted exports keep passwords and get a .enc suffix. Unencrypted
    exports drop passwords unless --include-passwords is given.
    """
    if encrypt and include_passwords:
        raise click.UsageError("--include-passwords only applies to --no-encrypt exports")

    target = path or Path(_default_export_name())
    if encrypt:
        target = ensure_encrypted_suffix(target)
        if not password:
            password = click.prompt(
                "Encryption password", hide_input=True, confirmation_prompt=True
            )
    else:
        password = None

    if target.exists() and not force:
        click.confirm(f"File '{target}' already exists. Overwrite?", abort=True)

    async def _export() -> int:
        transfer = await app.open_transfer()
        if not len(transfer.store):
            return 0
        return await transfer.export_to_file(target, password, include_passwords)

    count = run_async(_export())

    if count == 0:
        click.echo(click.style("No connections to export.", fg="yellow"))
        return

    if encrypt:
        label = "ENCRYPTED"
    else:
        label = "UNSAFE" if include_passwords else "SAFE"
    click.echo(click.style(f"Exported {count} connection(s) ({label}) to {target}", fg="green"))


@click.command(name="import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--password",
    envvar="DB_CLI_EXPORT_PASSWORD",
    help="Password of a sealed export (prompted when needed)",
)
@click.pass_obj
def import_connections(app: AppContext, path: Path, password: str | None) -> None:
    """Import connections from PATH.

    Connections whose id already exists are skipped and left unchanged.
    """

    async def _import(secret: str | None) -> tuple[bool, int | None]:
        transfer = await app.open_transfer()
        sealed = await transfer.is_sealed_file(path)
        try:
            return sealed, await transfer.import_from_file(path, secret)
        except EncryptedFileError:
            return sealed, None

    sealed, imported = run_async(_import(password))
    if imported is None:
        password = click.prompt("File is encrypted. Enter password", hide_input=True)
        sealed, imported = run_async(_import(password))
        if imported is None:
            fail(EncryptedFileError(suggestion="Provide the export password"))

    if imported == 0:
        click.echo(click.style("No new connections to import (all already exist).", fg="yellow"))
        return

    suffix = " (Decrypted)" if sealed else ""
    click.echo(click.style(f"Imported {imported} new connection(s){suffix}.", fg="green"))
    if not sealed:
        click.echo(
            click.style("Remember to update passwords for imported connections.", fg="yellow")
        )
