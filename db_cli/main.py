"""CLI entry point for db-cli."""

import sys
from pathlib import Path

import click
import structlog

from db_cli.cli import (
    add_connection,
    edit_connection,
    export_connections,
    import_connections,
    list_connections,
    remove_connection,
    show_connection,
    toggle_verbose,
)
from db_cli.cli.context import AppContext
from db_cli.config.settings import DbCliSettings
from db_cli.exceptions import ConfigurationError
from db_cli.utils.logging_config import configure_logging

log = structlog.get_logger(__name__)


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Connection profile file (default: ~/.db-cli-config.json)",
)
@click.option(
    "--settings",
    "settings_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="YAML settings file (default: ~/.config/db-cli/settings.yaml if present)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Logging level",
)
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON lines")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Path | None,
    settings_file: Path | None,
    log_level: str | None,
    json_logs: bool,
) -> None:
    """db-cli: manage database connection profiles."""
    try:
        settings = DbCliSettings.load(settings_file)
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)

    overrides: dict[str, object] = {}
    if config_path is not None:
        overrides["config_path"] = config_path.expanduser()
    if log_level is not None:
        overrides["log_level"] = log_level.upper()
    if json_logs:
        overrides["json_logs"] = True
    if overrides:
        settings = settings.model_copy(update=overrides)

    configure_logging(settings.log_level, json_logs=settings.json_logs)
    log.debug("settings_loaded", config_path=str(settings.config_path))

    ctx.obj = AppContext(settings=settings)


cli.add_command(list_connections)
cli.add_command(add_connection)
cli.add_command(show_connection)
cli.add_command(edit_connection)
cli.add_command(remove_connection)
cli.add_command(toggle_verbose)
cli.add_command(export_connections)
cli.add_command(import_connections)


def main() -> None:
    """Run the db-cli command line.

    Commands exit with status 1 on db-cli errors and 130 when interrupted.
    """
    cli()


if __name__ == "__main__":
    main()
