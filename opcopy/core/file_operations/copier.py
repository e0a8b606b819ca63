"""Copy files, directories and glob results between storage operators."""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from email.message import Message
from typing import TYPE_CHECKING

from opcopy.core.errors import ErrorKind, StorageError

from .glob import has_glob, literal_prefix
from .lister import lister
from .models import CopyOptions, CopyResult, ListOptions, StorageEntry
from .paths import (
    as_directory,
    filename_of,
    is_directory_path,
    join,
    normalize,
    parent_of,
    strip_prefix,
)
from .transfer import transfer


if TYPE_CHECKING:
    from opcopy.protocols import StorageOperatorProtocol


logger = logging.getLogger(__name__)


def disposition_filename(content_disposition: str | None) -> str | None:
    """Extract the filename suggested by a Content-Disposition header value.

    Handles both ``filename`` and RFC 2231 ``filename*`` parameters. Any
    directory part of the suggestion is dropped.
    """
    if not content_disposition:
        return None

    header = Message()
    header["Content-Disposition"] = content_disposition
    filename = header.get_filename()
    if not filename:
        return None

    name = filename.replace("\\", "/").rsplit("/", 1)[-1]
    if name in ("", ".", ".."):
        return None
    return name


def source_filename(path: str, entry: StorageEntry) -> str:
    """Filename to use when a source file is copied into a directory.

    Raises:
        StorageError: Unexpected if neither the path nor the entry's
            content disposition yields a filename
    """
    name = filename_of(path) or disposition_filename(entry.content_disposition)
    if name is None:
        raise StorageError(
            ErrorKind.UNEXPECTED,
            "Source has no filename",
            {"operation": "copy", "path": path},
        )
    return name


async def _replay(entries: list[StorageEntry]) -> AsyncIterator[StorageEntry]:
    for entry in entries:
        yield entry


class Copier:
    """Copies entries from one storage operator to another.

    Every copy is strictly sequential: one transfer is in flight at a time,
    and the set of destination directories created so far belongs to a
    single call.
    """

    def __init__(
        self,
        source: StorageOperatorProtocol,
        destination: StorageOperatorProtocol,
    ) -> None:
        """Initialize the copier.

        Args:
            source: Operator to read from
            destination: Operator to write to
        """
        self.source = source
        self.destination = destination

    async def copy(
        self,
        source_path: str,
        destination_path: str,
        options: CopyOptions | None = None,
    ) -> CopyResult:
        """Copy a file, a directory or the matches of a glob pattern.

        Args:
            source_path: File, directory or glob pattern on the source
            destination_path: Target path on the destination
            options: Copy options (recursion for directory sources)

        Returns:
            CopyResult summarizing the work done

        Raises:
            StorageError: On the first failure; already copied files stay
        """
        options = options or CopyOptions()
        source_path = normalize(source_path)
        destination_path = normalize(destination_path)

        start_time = time.perf_counter()
        result = CopyResult()

        try:
            await self._resolve(source_path, destination_path, options, result)
        except StorageError as e:
            e.with_context("source", f"{self.source.name}:{source_path}")
            e.with_context(
                "destination", f"{self.destination.name}:{destination_path}"
            )
            raise

        result.elapsed_time = time.perf_counter() - start_time
        logger.debug(
            "Copy completed: %s -> %s (%d files, %d bytes in %.2f seconds)",
            source_path,
            destination_path,
            result.files_copied,
            result.bytes_copied,
            result.elapsed_time,
        )
        return result

    async def _resolve(
        self,
        source_path: str,
        destination_path: str,
        options: CopyOptions,
        result: CopyResult,
    ) -> None:
        prefix = literal_prefix(source_path)
        if prefix is not None:
            logger.debug("Copying glob %s from prefix '%s'", source_path, prefix)
            entries = await lister(self.source, source_path, ListOptions(recursive=True))
            await self._copy_entries(prefix, entries, destination_path, result)
            return

        entry = await self.source.stat(source_path)

        if entry.is_dir:
            directory = as_directory(source_path)
            logger.debug(
                "Copying directory %s (recursive=%s)", directory, options.recursive
            )
            entries = await lister(
                self.source, directory, ListOptions(recursive=options.recursive)
            )
            await self._copy_entries(directory, entries, destination_path, result)
        elif entry.is_file:
            await self._copy_file(source_path, entry, destination_path, result)
        else:
            raise StorageError(
                ErrorKind.UNSUPPORTED,
                "Unknown entry mode",
                {"operation": "copy", "mode": entry.mode.value},
            )

    async def _stat_destination(self, path: str) -> StorageEntry | None:
        """Stat a destination path, returning None if it does not exist."""
        try:
            return await self.destination.stat(path)
        except StorageError as e:
            if e.kind is ErrorKind.NOT_FOUND:
                return None
            raise

    async def _copy_file(
        self,
        source_path: str,
        source_entry: StorageEntry,
        destination_path: str,
        result: CopyResult,
    ) -> None:
        destination_entry = await self._stat_destination(destination_path)

        if destination_entry is not None and destination_entry.is_dir:
            target = join(
                as_directory(destination_path),
                source_filename(source_path, source_entry),
            )
            logger.debug("Destination is a directory, copying into %s", target)
        elif destination_entry is not None:
            target = destination_path
            logger.debug("Destination file exists, overwriting %s", target)
        elif is_directory_path(destination_path):
            # A missing path carrying the directory marker becomes the directory
            await self._create_directory(destination_path, result)
            target = join(
                destination_path, source_filename(source_path, source_entry)
            )
        else:
            parent = parent_of(destination_path)
            if parent:
                await self._create_directory(parent, result)
            target = destination_path

        result.bytes_copied += await transfer(
            self.source,
            source_path,
            self.destination,
            target,
            source_entry.content_type,
        )
        result.files_copied += 1

    async def _copy_entries(
        self,
        source_prefix: str,
        entries: AsyncIterator[StorageEntry],
        destination_path: str,
        result: CopyResult,
    ) -> None:
        """Copy every file entry under ``source_prefix`` below the destination."""
        destination_entry = await self._stat_destination(destination_path)
        destination_dir = as_directory(destination_path)

        if (
            self.source is self.destination
            and strip_prefix(destination_dir, source_prefix) is not None
        ):
            # Files written below the source would show up in a lazy listing
            logger.debug(
                "Destination %s is inside the source, listing first", destination_dir
            )
            entries = _replay([entry async for entry in entries])

        if destination_entry is None:
            await self._create_directory(destination_dir, result)
        elif not destination_entry.is_dir:
            raise StorageError(
                ErrorKind.NOT_A_DIRECTORY,
                "Cannot copy directory or glob results onto a file",
                {"operation": "copy", "path": destination_path},
            )

        created_dirs = {destination_dir}

        async for entry in entries:
            if entry.is_dir:
                continue

            relative_path = strip_prefix(entry.path, source_prefix)
            if relative_path is None:
                relative_path = entry.path

            target = join(destination_dir, relative_path)

            parent = parent_of(target)
            if parent not in created_dirs:
                await self._create_directory(parent, result)
                created_dirs.add(parent)

            result.bytes_copied += await transfer(
                self.source,
                entry.path,
                self.destination,
                target,
                entry.content_type,
            )
            result.files_copied += 1

    async def _create_directory(self, path: str, result: CopyResult) -> None:
        logger.debug("Creating directory %s on %s", path, self.destination.name)
        await self.destination.create_directory(as_directory(path))
        result.directories_created += 1


async def copy(
    source: StorageOperatorProtocol,
    source_path: str,
    destination: StorageOperatorProtocol,
    destination_path: str,
    options: CopyOptions | None = None,
) -> CopyResult:
    """Copy ``source_path`` on ``source`` to ``destination_path`` on ``destination``.

    See ``Copier.copy`` for the destination rules.
    """
    return await Copier(source, destination).copy(
        source_path, destination_path, options
    )


async def copy_recursive(
    source: StorageOperatorProtocol,
    source_path: str,
    destination: StorageOperatorProtocol,
    destination_path: str,
) -> CopyResult:
    """Copy with ``recursive=True``."""
    return await copy(
        source,
        source_path,
        destination,
        destination_path,
        CopyOptions(recursive=True),
    )
