"""Protocol for storage operators."""

from collections.abc import AsyncIterator
from typing import Protocol, runtime_checkable

from opcopy.core.file_operations.models import ListOptions, StorageEntry, WriteOptions


@runtime_checkable
class ByteSinkProtocol(Protocol):
    """Writable byte sink returned by ``open_writer``."""

    async def write(self, chunk: bytes) -> None:
        """Append a chunk to the sink.

        Args:
            chunk: Bytes to write

        Raises:
            StorageError: If the chunk cannot be written
        """
        ...

    async def close(self) -> None:
        """Finalize the sink.

        Closing is the durability point: the written object becomes visible
        only once this returns.

        Raises:
            StorageError: If the object cannot be committed
        """
        ...

    async def abort(self) -> None:
        """Release the sink without finalizing it.

        Never deletes an object that existed before the sink was opened.
        """
        ...


@runtime_checkable
class StorageOperatorProtocol(Protocol):
    """Capability handle bound to one storage backend.

    Paths are root-relative, use ``/`` as separator, and carry a trailing
    ``/`` when they denote a directory. The empty string is the root.
    """

    name: str

    async def stat(self, path: str) -> StorageEntry:
        """Get metadata for a path.

        Args:
            path: Path to inspect

        Returns:
            Entry describing the path

        Raises:
            StorageError: NotFound if the path does not exist
        """
        ...

    async def create_directory(self, path: str) -> None:
        """Create a directory and any missing parents.

        An already existing directory is not an error.

        Args:
            path: Directory path to create

        Raises:
            StorageError: If the directory cannot be created
        """
        ...

    async def open_reader(self, path: str) -> AsyncIterator[bytes]:
        """Open a file for reading.

        Args:
            path: File path to read

        Returns:
            Async iterator yielding bounded-size chunks in order

        Raises:
            StorageError: If the file cannot be opened
        """
        ...

    async def open_writer(
        self, path: str, options: WriteOptions | None = None
    ) -> ByteSinkProtocol:
        """Open a file for writing, replacing any existing object.

        Args:
            path: File path to write
            options: Metadata attached to the written object

        Returns:
            Sink accepting the object's bytes

        Raises:
            StorageError: If the sink cannot be opened
        """
        ...

    def list(
        self, path: str, options: ListOptions | None = None
    ) -> AsyncIterator[StorageEntry]:
        """List entries under a directory path.

        The directory itself is not yielded. Order is backend defined.

        Args:
            path: Directory path to list
            options: Listing options (recursion)

        Returns:
            Async iterator of entries
        """
        ...
