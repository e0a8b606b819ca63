"""Local filesystem storage operator."""

from __future__ import annotations

import asyncio
import errno
import logging
import mimetypes
import os
import secrets
import stat
from collections.abc import AsyncIterator
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO

from opcopy.core.errors import ErrorKind, StorageError, storage_error_from_os_error
from opcopy.core.file_operations.enums import EntryMode
from opcopy.core.file_operations.models import ListOptions, StorageEntry, WriteOptions
from opcopy.core.file_operations.paths import (
    as_directory,
    is_directory_path,
    join,
    normalize,
)


logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1024 * 1024


def _guess_content_type(path: str) -> str | None:
    content_type, _ = mimetypes.guess_type(path)
    return content_type


class FileReader:
    """Async iterator over the chunks of an open file.

    The handle is released on exhaustion, on error or on ``aclose``, even if
    iteration never started.
    """

    def __init__(self, handle: BinaryIO, path: str, chunk_size: int):
        self._handle = handle
        self._path = path
        self._chunk_size = chunk_size

    def __aiter__(self) -> FileReader:
        return self

    async def __anext__(self) -> bytes:
        if self._handle.closed:
            raise StopAsyncIteration
        try:
            chunk = await asyncio.to_thread(self._handle.read, self._chunk_size)
        except OSError as e:
            await self.aclose()
            raise storage_error_from_os_error(e, "read", self._path) from e
        if not chunk:
            await self.aclose()
            raise StopAsyncIteration
        return chunk

    async def aclose(self) -> None:
        if not self._handle.closed:
            self._handle.close()


class FileSink:
    """Writes chunks to a temporary file next to the target.

    ``close`` moves the temporary file onto the target in one rename, so the
    target keeps its previous content until then. ``abort`` removes the
    temporary file.
    """

    def __init__(self, handle: BinaryIO, temp_path: Path, target: Path, path: str):
        self._handle = handle
        self._temp_path = temp_path
        self._target = target
        self._path = path
        self._closed = False

    async def write(self, chunk: bytes) -> None:
        self._ensure_open("write")
        try:
            await asyncio.to_thread(self._handle.write, chunk)
        except OSError as e:
            raise storage_error_from_os_error(e, "write", self._path) from e

    async def close(self) -> None:
        self._ensure_open("close")
        self._closed = True
        try:
            await asyncio.to_thread(self._commit)
        except OSError as e:
            raise storage_error_from_os_error(e, "close", self._path) from e

    async def abort(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await asyncio.to_thread(self._discard)
        except OSError as e:
            logger.debug("Failed to release writer for %s: %s", self._path, e)

    def _commit(self) -> None:
        try:
            try:
                self._handle.flush()
                os.fsync(self._handle.fileno())
            finally:
                self._handle.close()
            os.replace(self._temp_path, self._target)
        except OSError:
            self._temp_path.unlink(missing_ok=True)
            raise

    def _discard(self) -> None:
        try:
            self._handle.close()
        finally:
            self._temp_path.unlink(missing_ok=True)

    def _ensure_open(self, operation: str) -> None:
        if self._closed:
            raise StorageError(
                ErrorKind.UNEXPECTED,
                "Writer is already closed",
                {"operation": operation, "path": self._path},
            )


class FilesystemOperator:
    """Storage operator over a local directory tree.

    Every path is resolved below ``root``; paths escaping it through
    symbolic links are refused. Blocking calls run in worker threads.
    """

    def __init__(
        self,
        root: Path | str,
        name: str | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        """Initialize filesystem operator.

        Args:
            root: Directory every path is relative to
            name: Name used in logs and error context
            chunk_size: Size of the chunks yielded by readers
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.root = Path(root).expanduser().resolve()
        self.name = name or f"fs:{self.root}"
        self.chunk_size = chunk_size
        logger.debug("Initialized filesystem operator at: %s", self.root)

    def _resolve(self, path: str, operation: str) -> Path:
        relative = normalize(path).rstrip("/")
        full_path = self.root / relative if relative else self.root

        real_path = full_path.resolve()
        if real_path != self.root and self.root not in real_path.parents:
            raise StorageError(
                ErrorKind.PERMISSION_DENIED,
                "Path escapes the operator root",
                {"operation": operation, "path": path},
            )
        return full_path

    def _entry_from_stat(self, path: str, st: os.stat_result) -> StorageEntry:
        modified = datetime.fromtimestamp(st.st_mtime, tz=timezone.utc)
        if stat.S_ISDIR(st.st_mode):
            return StorageEntry(
                path=as_directory(path), mode=EntryMode.DIR, last_modified=modified
            )
        if stat.S_ISREG(st.st_mode):
            return StorageEntry(
                path=path,
                mode=EntryMode.FILE,
                size=st.st_size,
                content_type=_guess_content_type(path),
                last_modified=modified,
            )
        return StorageEntry(path=path, mode=EntryMode.UNKNOWN, last_modified=modified)

    async def stat(self, path: str) -> StorageEntry:
        path = normalize(path)
        full_path = self._resolve(path, "stat")
        try:
            st = await asyncio.to_thread(os.stat, full_path)
        except OSError as e:
            raise storage_error_from_os_error(e, "stat", path) from e
        entry = self._entry_from_stat(path.rstrip("/"), st)
        if is_directory_path(path) and not entry.is_dir:
            raise StorageError(
                ErrorKind.NOT_A_DIRECTORY,
                "Path is not a directory",
                {"operation": "stat", "path": path},
            )
        return entry

    async def create_directory(self, path: str) -> None:
        full_path = self._resolve(path, "create_directory")
        try:
            await asyncio.to_thread(full_path.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            raise storage_error_from_os_error(e, "create_directory", path) from e
        logger.debug("Created directory: %s", full_path)

    async def open_reader(self, path: str) -> FileReader:
        path = normalize(path)
        full_path = self._resolve(path, "read")
        try:
            handle = await asyncio.to_thread(full_path.open, "rb")
        except OSError as e:
            raise storage_error_from_os_error(e, "read", path) from e
        return FileReader(handle, path, self.chunk_size)

    async def open_writer(
        self, path: str, options: WriteOptions | None = None
    ) -> FileSink:
        # Content type is derived from the extension on stat, so options are unused
        path = normalize(path)
        if is_directory_path(path):
            raise StorageError(
                ErrorKind.IS_A_DIRECTORY,
                "Cannot write a file at a directory path",
                {"operation": "write", "path": path},
            )
        full_path = self._resolve(path, "write")
        try:
            handle, temp_path = await asyncio.to_thread(self._open_temp, full_path)
        except OSError as e:
            raise storage_error_from_os_error(e, "write", path) from e
        return FileSink(handle, temp_path, full_path, path)

    def _open_temp(self, target: Path) -> tuple[BinaryIO, Path]:
        """Create the temporary file a sink writes to, beside ``target``."""
        if target.is_dir():
            raise IsADirectoryError(errno.EISDIR, "Is a directory", str(target))

        temp_path = target.with_name(f".{target.name}.{secrets.token_hex(4)}.part")
        fd = os.open(temp_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o666)
        try:
            if target.exists():
                os.chmod(fd, stat.S_IMODE(os.stat(target).st_mode))
            return os.fdopen(fd, "wb"), temp_path
        except BaseException:
            os.close(fd)
            temp_path.unlink(missing_ok=True)
            raise

    async def list(
        self, path: str, options: ListOptions | None = None
    ) -> AsyncIterator[StorageEntry]:
        recursive = (options or ListOptions()).recursive
        pending = [as_directory(normalize(path))]
        visited: set[tuple[int, int]] = set()

        while pending:
            directory = pending.pop(0)
            entries = await asyncio.to_thread(self._scan, directory, visited)
            for entry in entries:
                yield entry
                if recursive and entry.is_dir:
                    pending.append(entry.path)

    def _scan(
        self, directory: str, visited: set[tuple[int, int]]
    ) -> list[StorageEntry]:
        """List one directory level, sorted by path.

        A directory already in ``visited``, such as one reached again through
        a symbolic link to an ancestor, lists as empty.
        """
        full_path = self._resolve(directory, "list")
        try:
            st = os.stat(full_path)
        except FileNotFoundError:
            # Listing a missing directory yields nothing, like an object store
            return []
        except OSError as e:
            raise storage_error_from_os_error(e, "list", directory) from e

        identity = (st.st_dev, st.st_ino)
        if identity in visited:
            logger.debug("Skipping %s, directory already listed", directory)
            return []
        visited.add(identity)

        try:
            iterator = os.scandir(full_path)
        except FileNotFoundError:
            return []
        except OSError as e:
            raise storage_error_from_os_error(e, "list", directory) from e

        entries: list[StorageEntry] = []
        with iterator:
            for item in iterator:
                item_path = join(directory, item.name)
                try:
                    st = item.stat()
                except OSError as e:
                    raise storage_error_from_os_error(e, "list", item_path) from e
                entries.append(self._entry_from_stat(item_path, st))
        entries.sort(key=lambda entry: entry.path)
        return entries


def create_filesystem_operator(
    root: Path | str, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> FilesystemOperator:
    """Create a filesystem operator rooted at ``root``."""
    return FilesystemOperator(root, chunk_size=chunk_size)
