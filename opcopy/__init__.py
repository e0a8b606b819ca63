"""opcopy - Copy and list files across storage backends."""

from importlib.metadata import distribution

from .core.errors import ErrorKind, StorageError
from .core.file_operations import (
    CopyOptions,
    CopyResult,
    EntryMode,
    ListOptions,
    StorageEntry,
    copy,
    copy_recursive,
    list_entries,
    lister,
)


__version__ = distribution(__package__ or "opcopy").version

__all__ = [
    "CopyOptions",
    "CopyResult",
    "EntryMode",
    "ErrorKind",
    "ListOptions",
    "StorageEntry",
    "StorageError",
    "copy",
    "copy_recursive",
    "list_entries",
    "lister",
    "__version__",
]

# Import CLI after setting __version__ to avoid circular imports
from .cli import app, main


__all__ += ["app", "main"]
