"""
Export and import commands.

This module provides commands for exporting APIs from a source platform into
the staging area and importing staged APIs into a destination platform,
independently of the transformation steps.
"""

import asyncio

import click

from apim_sync.cli.context import SyncContext
from apim_sync.cli.decorators import handle_errors, pass_context
from apim_sync.cli.utils import (
    echo_error,
    echo_info,
    echo_success,
    echo_warning,
    print_failures,
    print_names,
    step_progress,
)
from apim_sync.models import ImportResult
from apim_sync.platforms import OfframpSource, OnrampDestination
from apim_sync.utils.logging import get_logger

logger = get_logger(__name__)

SOURCE_CHOICES = [source.value for source in OfframpSource]
DESTINATION_CHOICES = [destination.value for destination in OnrampDestination]


@click.command(name="export")
@click.option(
    "--platform",
    "-p",
    type=click.Choice(SOURCE_CHOICES, case_sensitive=False),
    default=OfframpSource.AZURE.value,
    show_default=True,
    help="Platform to export APIs from",
)
@click.option("--api", "api_name", help="Only export this API (raw or qualified name)")
@click.option(
    "--only-new",
    is_flag=True,
    help="Skip APIs that are already staged",
)
@pass_context
@handle_errors
def export(ctx: SyncContext, platform: str, api_name: str | None, only_new: bool) -> None:
    """Export APIs from a source platform to the staging area.

    Each API is written to export/<platform>/<group>/<name>.json together with
    its schema, when the platform has one. Revisions are never exported.

    Examples:

        \b
        # Export every API from Azure API Management
        apim-sync export --platform azure

        \b
        # Export one API, leaving already staged APIs alone
        apim-sync export --api orders-v2 --only-new
    """
    with step_progress(f"Exporting APIs from {platform}"):
        result = asyncio.run(ctx.coordinator.export(platform, api_name, only_new or None))

    if result.error:
        echo_error(result.error)
        raise click.exceptions.Exit(1)

    print_names("Exported", result.exported)
    if result.skipped:
        echo_info(f"{len(result.skipped)} APIs already staged")
    print_failures(result.failures)

    if result.failures:
        echo_warning(result.message)
        raise click.exceptions.Exit(1)

    echo_success(result.message)


@click.command(name="export-service")
@click.option(
    "--platform",
    "-p",
    type=click.Choice(SOURCE_CHOICES, case_sensitive=False),
    default=OfframpSource.AZURE.value,
    show_default=True,
    help="Platform to export service metadata from",
)
@pass_context
@handle_errors
def export_service(ctx: SyncContext, platform: str) -> None:
    """Export the service metadata of a source platform.

    The metadata (publisher, developer portal and gateway URLs) is written to
    export/<platform>/<service>.json and feeds the offramp step.
    """
    result = asyncio.run(ctx.coordinator.export_service(platform))

    if not result.success:
        echo_error(result.message)
        raise click.exceptions.Exit(1)

    echo_success(result.message)


@click.command(name="import")
@click.option(
    "--platform",
    "-p",
    type=click.Choice(DESTINATION_CHOICES, case_sensitive=False),
    default=OnrampDestination.APIHUB.value,
    show_default=True,
    help="Platform to import staged APIs into",
)
@click.option("--api", "api_name", help="Only import the group of this API")
@click.option(
    "--only-new",
    is_flag=True,
    help="Leave APIs that already exist on the platform untouched",
)
@pass_context
@handle_errors
def import_cmd(ctx: SyncContext, platform: str, api_name: str | None, only_new: bool) -> None:
    """Import staged APIs into a destination platform.

    Reads export/<platform>/ as written by the onramp command and creates or
    updates each API with its version and spec.

    Examples:

        \b
        # Import everything staged for API hub
        apim-sync import --platform apihub

        \b
        # Only create APIs that do not exist yet
        apim-sync import --only-new
    """
    with step_progress(f"Importing APIs into {platform}"):
        result = asyncio.run(ctx.coordinator.import_staged(platform, api_name, only_new or None))

    if not isinstance(result, ImportResult):
        echo_error(result)
        raise click.exceptions.Exit(1)

    print_names("Imported", result.imported)
    if result.skipped:
        echo_info(f"{len(result.skipped)} APIs already present")
    print_failures(result.failures)

    if result.failures:
        echo_warning(f"Imported {len(result.imported)} APIs, {len(result.failures)} failed")
        raise click.exceptions.Exit(1)

    echo_success(f"Imported {len(result.imported)} APIs into {platform}")
