"""CLI command modules."""

import typer

from opcopy.cli.commands.copy import register_commands as register_copy_commands
from opcopy.cli.commands.list import register_commands as register_list_commands


def register_all_commands(app: typer.Typer) -> None:
    """Register all CLI commands with the main app.

    Args:
        app: The main Typer app
    """
    register_copy_commands(app)
    register_list_commands(app)
