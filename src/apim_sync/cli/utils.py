"""
Output helpers for CLI commands.

Status lines go through ``click.secho``; tables and spinners through Rich.
"""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import click
from rich.console import Console
from rich.status import Status
from rich.table import Table

from apim_sync.models import ApiFailure

console = Console()


def _echo(symbol: str, message: str, color: str, err: bool = False) -> None:
    click.secho(f"{symbol} {message}", fg=color, err=err)


def echo_success(message: str) -> None:
    _echo("✓", message, "green")


def echo_error(message: str) -> None:
    _echo("✗", message, "red", err=True)


def echo_warning(message: str) -> None:
    _echo("⚠", message, "yellow")


def echo_info(message: str) -> None:
    _echo("ℹ", message, "blue")


@contextmanager
def step_progress(message: str) -> Generator[None, None, None]:
    """Show a spinner while a pipeline step runs, then a ✓ or ✗ line."""
    status = Status(f"[cyan]{message}...[/cyan]", spinner="dots", console=console)
    status.start()
    try:
        yield
    except Exception:
        status.stop()
        console.print(f"[red]✗[/red] {message}")
        raise

    status.stop()
    console.print(f"[green]✓[/green] {message}")


def print_table(title: str, columns: list[str], rows: list[list[Any]]) -> None:
    table = Table(title=title)
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*(str(cell) for cell in row))

    console.print(table)


def print_names(title: str, names: list[str]) -> None:
    """Print processed API names, one per row."""
    if names:
        print_table(title, ["API"], [[name] for name in names])


def print_failures(failures: list[ApiFailure]) -> None:
    """Print per-API failures collected by a pipeline stage."""
    if not failures:
        return

    print_table(
        f"Failures ({len(failures)})",
        ["API", "Stage", "Error"],
        [[failure.api_name, failure.stage, failure.message] for failure in failures],
    )
