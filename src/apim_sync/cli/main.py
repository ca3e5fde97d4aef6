"""
Main CLI entry point for APIM Sync.

This module provides the command-line interface for syncing API descriptors
between API management platforms.
"""

import sys
from pathlib import Path

import click
from dotenv import load_dotenv

from apim_sync import __version__
from apim_sync.cli.commands import cleanup as cleanup_commands
from apim_sync.cli.commands import export_import
from apim_sync.cli.commands import serve as serve_commands
from apim_sync.cli.commands import sync as sync_commands
from apim_sync.cli.commands import transform as transform_commands
from apim_sync.cli.context import SyncContext
from apim_sync.utils.logging import configure_logging, get_logger

# Load environment variables from .env file
load_dotenv()

logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="apim-sync")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (defaults to AZURE_* and APIGEE_* variables)",
    envvar="APIM_SYNC_CONFIG",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Set console logging level (file logging stays at DEBUG)",
    envvar="APIM_SYNC_LOG_LEVEL",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    help="Also write logs to this file",
    envvar="APIM_SYNC_LOG_FILE",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Path | None,
    log_level: str,
    log_file: Path | None,
) -> None:
    """APIM Sync - Sync API descriptors between API management platforms.

    APIs are offramped from a source platform (exported and mapped to
    platform-agnostic canonical records) and onramped to a destination
    platform (mapped to its native form and imported).

    Examples:

        \b
        # Check which platforms are configured and reachable
        apim-sync status

        \b
        # Sync from Azure API Management to Apigee API hub
        apim-sync sync --offramp azure --onramp apihub

        \b
        # Run the HTTP service
        apim-sync serve --port 8080
    """
    configure_logging(level=log_level, log_file=str(log_file) if log_file else None)

    ctx.obj = SyncContext(
        config_path=config,
        log_level=log_level,
        log_file=log_file,
    )

    logger.debug(
        "cli_initialized",
        config=str(config) if config else None,
        log_level=log_level,
    )


cli.add_command(export_import.export)
cli.add_command(export_import.export_service)
cli.add_command(export_import.import_cmd, name="import")
cli.add_command(transform_commands.offramp)
cli.add_command(transform_commands.onramp)
cli.add_command(sync_commands.sync)
cli.add_command(sync_commands.status)
cli.add_command(cleanup_commands.clean)
cli.add_command(serve_commands.serve)


def main() -> int:
    """Main entry point for CLI."""
    try:
        rv = cli(standalone_mode=False)
        return rv if isinstance(rv, int) else 0
    except click.exceptions.Exit as e:
        return e.exit_code
    except click.ClickException as e:
        e.show()
        return e.exit_code
    except click.exceptions.Abort:
        click.echo("Aborted!", err=True)
        return 1
    except Exception as e:
        logger.error("unexpected_error", error=str(e), exc_info=True)
        click.echo(f"Error: {e}", err=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
