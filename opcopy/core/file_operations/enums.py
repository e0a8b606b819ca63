"""Enums for file operations."""

from enum import Enum


class EntryMode(Enum):
    """Kind of a storage entry."""

    FILE = "file"
    DIR = "dir"
    UNKNOWN = "unknown"
