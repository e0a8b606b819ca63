"""List command for opcopy CLI."""

import asyncio
import json
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from opcopy.cli.app import AppContext
from opcopy.cli.decorators import handle_errors
from opcopy.core.file_operations import ListOptions, StorageEntry, list_entries


def _entry_to_dict(entry: StorageEntry) -> dict[str, Any]:
    return {
        "path": entry.path,
        "mode": entry.mode.value,
        "size": entry.size,
        "content_type": entry.content_type,
        "last_modified": (
            entry.last_modified.isoformat() if entry.last_modified else None
        ),
    }


def _print_table(title: str, entries: list[StorageEntry]) -> None:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Path", style="cyan")
    table.add_column("Type")
    table.add_column("Size", justify="right")
    table.add_column("Modified", style="dim")

    for entry in entries:
        table.add_row(
            entry.path,
            entry.mode.value,
            "" if entry.is_dir else str(entry.size),
            entry.last_modified.strftime("%Y-%m-%d %H:%M:%S")
            if entry.last_modified
            else "",
        )

    Console().print(table)


@handle_errors
def list_command(
    ctx: typer.Context,
    location: Annotated[
        str,
        typer.Argument(help="Directory or glob pattern to list"),
    ],
    recursive: Annotated[
        bool,
        typer.Option("-r", "--recursive", help="List subdirectories recursively"),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print one JSON object per entry"),
    ] = False,
) -> None:
    """List the entries of a directory or the matches of a glob pattern."""
    app_context: AppContext = ctx.obj
    operator, path = app_context.resolve_location(location)

    entries = asyncio.run(
        list_entries(operator, path, ListOptions(recursive=recursive))
    )

    if json_output:
        for entry in entries:
            typer.echo(json.dumps(_entry_to_dict(entry)))
        return

    _print_table(location, entries)


def register_commands(app: typer.Typer) -> None:
    """Register list command with the main app.

    Args:
        app: The main Typer app
    """
    app.command(name="ls")(list_command)
