"""Command-line interface for opcopy."""

from opcopy.cli.app import app, main


__all__ = ["app", "main"]
