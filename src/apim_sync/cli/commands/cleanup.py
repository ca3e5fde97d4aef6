"""
Cleanup command to remove staged exports of a platform.
"""

import click

from apim_sync.cli.context import SyncContext
from apim_sync.cli.decorators import confirm_action, handle_errors, pass_context
from apim_sync.cli.utils import echo_info, echo_success
from apim_sync.platforms import OfframpSource, OnrampDestination

PLATFORM_CHOICES = [source.value for source in OfframpSource] + [
    destination.value for destination in OnrampDestination
]


@click.command(name="clean")
@click.option(
    "--platform",
    "-p",
    type=click.Choice(PLATFORM_CHOICES, case_sensitive=False),
    required=True,
    help="Platform whose staged exports are removed",
)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@pass_context
@confirm_action("This will delete the staged exports of the platform. Continue?")
@handle_errors
def clean(ctx: SyncContext, platform: str, yes: bool) -> None:
    """Remove export/<platform>/ from the staging area.

    The canonical area is left untouched.
    """
    if ctx.coordinator.clean(platform):
        echo_success(f"Removed staged exports of {platform}")
    else:
        echo_info(f"Nothing staged for {platform}")
