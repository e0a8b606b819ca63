"""In-memory storage operator."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from datetime import datetime, timezone

from opcopy.core.errors import ErrorKind, StorageError
from opcopy.core.file_operations.enums import EntryMode
from opcopy.core.file_operations.models import ListOptions, StorageEntry, WriteOptions
from opcopy.core.file_operations.paths import (
    as_directory,
    is_directory_path,
    normalize,
    parent_of,
)


logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass
class MemoryObject:
    """Stored object with its metadata."""

    data: bytes
    content_type: str | None = None
    content_disposition: str | None = None
    last_modified: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class MemorySink:
    """Buffers written chunks and commits them on close."""

    def __init__(self, operator: "MemoryOperator", path: str, options: WriteOptions):
        self._operator = operator
        self._path = path
        self._options = options
        self._chunks: list[bytes] = []
        self._closed = False

    async def write(self, chunk: bytes) -> None:
        self._ensure_open("write")
        self._chunks.append(bytes(chunk))

    async def close(self) -> None:
        self._ensure_open("close")
        self._closed = True
        self._operator.put(
            self._path,
            b"".join(self._chunks),
            content_type=self._options.content_type,
        )
        self._chunks = []

    async def abort(self) -> None:
        self._closed = True
        self._chunks = []

    def _ensure_open(self, operation: str) -> None:
        if self._closed:
            raise StorageError(
                ErrorKind.UNEXPECTED,
                "Writer is already closed",
                {"operation": operation, "path": self._path},
            )


class MemoryOperator:
    """Storage operator keeping objects in a dictionary.

    Behaves like an object store: directories exist when created explicitly
    or when an object lives below them, and writing an object never requires
    its parent directory to exist. Data is lost when the operator is dropped.
    """

    def __init__(self, name: str = "memory", chunk_size: int = DEFAULT_CHUNK_SIZE):
        """Initialize memory operator.

        Args:
            name: Name used in logs and error context
            chunk_size: Size of the chunks yielded by readers
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.name = name
        self.chunk_size = chunk_size
        self._objects: dict[str, MemoryObject] = {}
        self._directories: set[str] = set()
        logger.debug("Initialized memory operator %s", name)

    def put(
        self,
        path: str,
        data: bytes | str,
        content_type: str | None = None,
        content_disposition: str | None = None,
    ) -> None:
        """Store an object directly, replacing any existing one."""
        path = normalize(path)
        if is_directory_path(path):
            raise StorageError(
                ErrorKind.IS_A_DIRECTORY,
                "Cannot write an object at a directory path",
                {"operation": "write", "path": path},
            )
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._objects[path] = MemoryObject(
            data=data,
            content_type=content_type,
            content_disposition=content_disposition,
        )
        logger.debug("Stored %d bytes at %s on %s", len(data), path, self.name)

    def get(self, path: str) -> bytes:
        """Return an object's bytes."""
        obj = self._objects.get(normalize(path))
        if obj is None:
            raise StorageError(
                ErrorKind.NOT_FOUND,
                "Object not found",
                {"operation": "read", "path": path},
            )
        return obj.data

    def paths(self) -> list[str]:
        """Sorted paths of every stored object."""
        return sorted(self._objects)

    async def stat(self, path: str) -> StorageEntry:
        path = normalize(path)
        if path == "":
            return StorageEntry(path="", mode=EntryMode.DIR)

        obj = self._objects.get(path.rstrip("/"))
        if obj is not None:
            if is_directory_path(path):
                raise StorageError(
                    ErrorKind.NOT_A_DIRECTORY,
                    "Path is not a directory",
                    {"operation": "stat", "path": path},
                )
            return self._file_entry(path, obj)

        directory = as_directory(path)
        if self._directory_exists(directory):
            return StorageEntry(path=directory, mode=EntryMode.DIR)

        raise StorageError(
            ErrorKind.NOT_FOUND,
            "Path not found",
            {"operation": "stat", "path": path},
        )

    async def create_directory(self, path: str) -> None:
        directory = as_directory(normalize(path))
        while directory:
            if directory.rstrip("/") in self._objects:
                raise StorageError(
                    ErrorKind.ALREADY_EXISTS,
                    "A file exists at the directory path",
                    {"operation": "create_directory", "path": directory},
                )
            self._directories.add(directory)
            directory = parent_of(directory)

    async def open_reader(self, path: str) -> AsyncIterator[bytes]:
        path = normalize(path)
        obj = None if is_directory_path(path) else self._objects.get(path)
        if obj is None:
            if self._directory_exists(as_directory(path)):
                raise StorageError(
                    ErrorKind.IS_A_DIRECTORY,
                    "Cannot read a directory",
                    {"operation": "read", "path": path},
                )
            raise StorageError(
                ErrorKind.NOT_FOUND,
                "Object not found",
                {"operation": "read", "path": path},
            )
        return self._read_chunks(obj.data)

    async def _read_chunks(self, data: bytes) -> AsyncIterator[bytes]:
        for offset in range(0, len(data), self.chunk_size):
            yield data[offset : offset + self.chunk_size]

    async def open_writer(
        self, path: str, options: WriteOptions | None = None
    ) -> MemorySink:
        path = normalize(path)
        if is_directory_path(path):
            raise StorageError(
                ErrorKind.IS_A_DIRECTORY,
                "Cannot write an object at a directory path",
                {"operation": "write", "path": path},
            )
        return MemorySink(self, path, options or WriteOptions())

    async def list(
        self, path: str, options: ListOptions | None = None
    ) -> AsyncIterator[StorageEntry]:
        recursive = (options or ListOptions()).recursive
        directory = as_directory(normalize(path))

        files: list[StorageEntry] = []
        subdirectories: set[str] = set()

        for key, obj in self._objects.items():
            if not key.startswith(directory):
                continue
            rest = key[len(directory) :]
            if recursive or "/" not in rest:
                files.append(self._file_entry(key, obj))
            else:
                subdirectories.add(directory + rest.split("/", 1)[0] + "/")

        for marker in self._directories:
            if marker == directory or not marker.startswith(directory):
                continue
            rest = marker[len(directory) :]
            if recursive:
                subdirectories.add(marker)
            else:
                subdirectories.add(directory + rest.split("/", 1)[0] + "/")

        entries = files + [
            StorageEntry(path=subdirectory, mode=EntryMode.DIR)
            for subdirectory in subdirectories
        ]
        entries.sort(key=lambda entry: entry.path)

        for entry in entries:
            yield entry

    def _directory_exists(self, directory: str) -> bool:
        if directory in self._directories:
            return True
        return any(key.startswith(directory) for key in self._objects) or any(
            marker.startswith(directory) for marker in self._directories
        )

    def _file_entry(self, path: str, obj: MemoryObject) -> StorageEntry:
        return StorageEntry(
            path=path,
            mode=EntryMode.FILE,
            size=len(obj.data),
            content_type=obj.content_type,
            content_disposition=obj.content_disposition,
            last_modified=obj.last_modified,
        )


def create_memory_operator(
    name: str = "memory", chunk_size: int = DEFAULT_CHUNK_SIZE
) -> MemoryOperator:
    """Create an empty in-memory operator."""
    return MemoryOperator(name=name, chunk_size=chunk_size)
