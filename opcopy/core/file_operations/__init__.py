"""Copy, list and glob engine over storage operators."""

from .copier import Copier, copy, copy_recursive
from .enums import EntryMode
from .glob import GlobPattern, compile_glob, has_glob, literal_prefix, split
from .lister import list_entries, lister
from .models import CopyOptions, CopyResult, ListOptions, StorageEntry, WriteOptions
from .paths import normalize
from .transfer import transfer


__all__ = [
    "CopyOptions",
    "CopyResult",
    "Copier",
    "EntryMode",
    "GlobPattern",
    "ListOptions",
    "StorageEntry",
    "WriteOptions",
    "compile_glob",
    "copy",
    "copy_recursive",
    "has_glob",
    "list_entries",
    "lister",
    "literal_prefix",
    "normalize",
    "split",
    "transfer",
]
