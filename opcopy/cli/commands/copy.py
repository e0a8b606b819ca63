"""Copy command for opcopy CLI."""

import asyncio
import logging
from typing import Annotated

import typer
from rich.console import Console

from opcopy.cli.app import AppContext
from opcopy.cli.decorators import handle_errors
from opcopy.core.file_operations import CopyOptions, copy


logger = logging.getLogger(__name__)


@handle_errors
def copy_command(
    ctx: typer.Context,
    source: Annotated[
        str,
        typer.Argument(help="File, directory or glob pattern to copy from"),
    ],
    destination: Annotated[
        str,
        typer.Argument(help="Target path; end it with '/' to copy into a directory"),
    ],
    recursive: Annotated[
        bool,
        typer.Option("-r", "--recursive", help="Copy directories recursively"),
    ] = False,
) -> None:
    """Copy a file, a directory or the matches of a glob pattern."""
    app_context: AppContext = ctx.obj

    source_operator, source_path = app_context.resolve_location(source)
    destination_operator, destination_path = app_context.resolve_location(
        destination
    )

    result = asyncio.run(
        copy(
            source_operator,
            source_path,
            destination_operator,
            destination_path,
            CopyOptions(recursive=recursive),
        )
    )

    console = Console()
    console.print(
        f"[green]✓[/green] Copied {result.files_copied} file(s), "
        f"{result.bytes_copied} bytes in {result.elapsed_time:.2f}s "
        f"({result.speed_mbps:.2f} MB/s)"
    )
    if result.directories_created:
        console.print(f"  Created {result.directories_created} directories")


def register_commands(app: typer.Typer) -> None:
    """Register copy command with the main app.

    Args:
        app: The main Typer app
    """
    app.command(name="cp")(copy_command)
