"""Models for storage entries, operation options and copy results."""

from dataclasses import dataclass
from datetime import datetime

from .enums import EntryMode


@dataclass(frozen=True)
class StorageEntry:
    """One stat or listing result produced by a storage backend."""

    path: str
    mode: EntryMode
    size: int = 0
    content_type: str | None = None
    content_disposition: str | None = None
    last_modified: datetime | None = None

    @property
    def is_file(self) -> bool:
        return self.mode is EntryMode.FILE

    @property
    def is_dir(self) -> bool:
        return self.mode is EntryMode.DIR

    @property
    def name(self) -> str:
        """Last path segment, without the directory marker."""
        return self.path.rstrip("/").rsplit("/", 1)[-1]


@dataclass(frozen=True)
class ListOptions:
    """Options for listing a path."""

    recursive: bool = False


@dataclass(frozen=True)
class CopyOptions:
    """Options for copying a path."""

    recursive: bool = False


@dataclass(frozen=True)
class WriteOptions:
    """Metadata attached to a sink when it is opened.

    Only ``content_type`` is carried over from the source object.
    """

    content_type: str | None = None


@dataclass
class CopyResult:
    """Summary of a completed copy operation."""

    files_copied: int = 0
    bytes_copied: int = 0
    directories_created: int = 0
    elapsed_time: float = 0.0

    @property
    def speed_mbps(self) -> float:
        """Calculate copy speed in MB/s."""
        if self.elapsed_time > 0:
            return (self.bytes_copied / (1024 * 1024)) / self.elapsed_time
        return 0.0
