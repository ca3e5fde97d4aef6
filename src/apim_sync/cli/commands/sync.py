"""
Sync and status commands.

This module provides the end-to-end sync command and a connectivity check of
every supported platform.
"""

import asyncio

import click

from apim_sync.cli.commands.export_import import DESTINATION_CHOICES, SOURCE_CHOICES
from apim_sync.cli.context import SyncContext
from apim_sync.cli.decorators import handle_errors, pass_context
from apim_sync.cli.utils import echo_error, echo_success, print_failures, print_table, step_progress
from apim_sync.utils.logging import get_logger

logger = get_logger(__name__)


@click.command(name="sync")
@click.option(
    "--offramp",
    "offramp_platform",
    type=click.Choice(SOURCE_CHOICES, case_sensitive=False),
    help="Platform to offramp APIs from",
)
@click.option(
    "--onramp",
    "onramp_platform",
    type=click.Choice(DESTINATION_CHOICES, case_sensitive=False),
    help="Platform to onramp APIs to",
)
@pass_context
@handle_errors
def sync(ctx: SyncContext, offramp_platform: str | None, onramp_platform: str | None) -> None:
    """Sync APIs from one platform to another.

    Offramp exports the source platform's APIs and canonicalizes them; onramp
    stages the canonical APIs for the destination platform and imports them.
    Either direction may be given on its own.

    Examples:

        \b
        # Full sync from Azure API Management to Apigee API hub
        apim-sync sync --offramp azure --onramp apihub

        \b
        # Only refresh the canonical area
        apim-sync sync --offramp azure
    """
    if not offramp_platform and not onramp_platform:
        raise click.UsageError("Give at least one of --offramp or --onramp.")

    with step_progress("Syncing APIs"):
        result = asyncio.run(ctx.coordinator.sync(offramp_platform, onramp_platform))

    print_failures(result.failures)

    if not result.result:
        echo_error(result.message)
        raise click.exceptions.Exit(1)

    echo_success(result.message)


@click.command(name="status")
@pass_context
@handle_errors
def status(ctx: SyncContext) -> None:
    """Show configuration and connectivity of every supported platform."""
    statuses = asyncio.run(ctx.coordinator.status())

    rows = [
        [tag, "yes" if platform_status.connected else "no", platform_status.message]
        for tag, platform_status in statuses.items()
    ]
    print_table("Platforms", ["Platform", "Connected", "Message"], rows)
