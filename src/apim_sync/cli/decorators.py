"""
Decorators shared by the CLI commands.

``handle_errors`` turns the exceptions that escape a command into an error
message and a distinct exit code, so scripts driving ``apim-sync`` can tell a
bad configuration from a rejected token or a broken staging directory.
"""

import functools
from collections.abc import Callable

import click

from apim_sync.cli.context import SyncContext
from apim_sync.client.exceptions import (
    APIError,
    AuthenticationError,
    ConfigurationError,
    StagingError,
)
from apim_sync.utils.logging import get_logger

logger = get_logger(__name__)

# Checked in order: AuthenticationError is an APIError
EXIT_CODES: list[tuple[type[Exception], int, str, str]] = [
    (
        ConfigurationError,
        2,
        "Configuration Error",
        "Check the --config file or the AZURE_* / APIGEE_* environment variables.",
    ),
    (
        AuthenticationError,
        3,
        "Authentication Error",
        "The platform rejected the token. Check the token or client credentials.",
    ),
    (APIError, 4, "API Error", ""),
    (
        StagingError,
        5,
        "Staging Error",
        "Check that the export and canonical directories are writable.",
    ),
]


def pass_context(f: Callable) -> Callable:
    """Pass the :class:`SyncContext` stored on the click context as first argument."""

    @click.pass_context
    @functools.wraps(f)
    def wrapper(click_ctx: click.Context, *args, **kwargs):
        sync_ctx: SyncContext = click_ctx.obj
        return f(sync_ctx, *args, **kwargs)

    return wrapper


def _exit_code_for(error: Exception) -> tuple[int, str, str]:
    for error_type, code, label, hint in EXIT_CODES:
        if isinstance(error, error_type):
            return code, label, hint
    return 1, "Unexpected Error", "See the log output for details."


def handle_errors(f: Callable) -> Callable:
    """
    Report errors escaping a command and exit with a matching code.

    Exit codes: 1 unexpected, 2 configuration, 3 authentication, 4 API,
    5 staging. ``click`` exits and usage errors pass through untouched.
    """

    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except (click.exceptions.Exit, click.ClickException, click.Abort):
            raise
        except Exception as e:
            code, label, hint = _exit_code_for(e)
            logger.error(
                "command_failed",
                command=f.__name__,
                error_type=type(e).__name__,
                error=str(e),
                exc_info=code == 1,
            )

            click.echo(f"{label}: {e}", err=True)
            if isinstance(e, APIError) and e.status_code:
                click.echo(f"Response status: {e.status_code}", err=True)
            if hint:
                click.echo(hint, err=True)
            raise click.exceptions.Exit(code) from e

    return wrapper


def confirm_action(message: str = "Do you want to continue?") -> Callable:
    """Ask for confirmation before running a command, unless ``--yes`` was given."""

    def decorator(f: Callable) -> Callable:
        @functools.wraps(f)
        def wrapper(*args, **kwargs):
            if click.get_current_context().params.get("yes", False):
                return f(*args, **kwargs)

            if not click.confirm(message):
                click.echo("Nothing removed.")
                raise click.exceptions.Exit(0)

            return f(*args, **kwargs)

        return wrapper

    return decorator
