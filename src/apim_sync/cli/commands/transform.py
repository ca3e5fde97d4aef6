"""
Offramp and onramp commands.

Offramp maps staged source payloads to canonical records; onramp maps canonical
records to a destination platform's native form. Both commands work on the
staging area only; see ``sync`` for the full export and import round trip.
"""

import click

from apim_sync.cli.commands.export_import import DESTINATION_CHOICES, SOURCE_CHOICES
from apim_sync.cli.context import SyncContext
from apim_sync.cli.decorators import handle_errors, pass_context
from apim_sync.cli.utils import echo_success, echo_warning, print_failures, print_names
from apim_sync.models import TransformResult
from apim_sync.platforms import OfframpSource, OnrampDestination


def _report(result: TransformResult, action: str) -> None:
    print_names(action.capitalize(), result.written)
    print_failures(result.failures)

    if result.failures:
        echo_warning(f"{action.capitalize()} {len(result.written)} APIs, {len(result.failures)} failed")
        raise click.exceptions.Exit(1)

    echo_success(f"{action.capitalize()} {len(result.written)} APIs")


@click.command(name="offramp")
@click.option(
    "--platform",
    "-p",
    type=click.Choice(SOURCE_CHOICES, case_sensitive=False),
    default=OfframpSource.AZURE.value,
    show_default=True,
    help="Platform whose staged APIs are canonicalized",
)
@click.option("--api", "api_name", help="Only offramp the group of this API")
@pass_context
@handle_errors
def offramp(ctx: SyncContext, platform: str, api_name: str | None) -> None:
    """Map staged source APIs to canonical records.

    Reads export/<platform>/ and writes canonical/<group>/<name>-<platform>.json.
    Run ``export`` first.
    """
    _report(ctx.coordinator.canonicalize(platform, api_name), "offramped")


@click.command(name="onramp")
@click.option(
    "--platform",
    "-p",
    type=click.Choice(DESTINATION_CHOICES, case_sensitive=False),
    default=OnrampDestination.APIHUB.value,
    show_default=True,
    help="Platform to stage canonical APIs for",
)
@click.option("--api", "api_name", help="Only onramp the group of this API")
@pass_context
@handle_errors
def onramp(ctx: SyncContext, platform: str, api_name: str | None) -> None:
    """Stage canonical records in a destination platform's native form.

    Reads canonical/ and writes export/<platform>/. Run ``import`` afterwards
    to push the staged APIs.
    """
    _report(ctx.coordinator.stage_onramp(platform, api_name), "onramped")
