"""Listing with transparent glob support."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import replace
from typing import TYPE_CHECKING

from .glob import compile_glob, literal_prefix
from .models import ListOptions, StorageEntry
from .paths import as_directory


if TYPE_CHECKING:
    from opcopy.protocols import StorageOperatorProtocol


logger = logging.getLogger(__name__)


async def lister(
    operator: StorageOperatorProtocol,
    path: str,
    options: ListOptions | None = None,
) -> AsyncIterator[StorageEntry]:
    """Lazily list entries under a path.

    A path holding glob characters is listed recursively from its literal
    prefix and filtered against the full pattern; entries that do not match
    are dropped. Any other path is listed with the caller's options.
    Directory entries pass through either way. The iterator is single-pass.

    Args:
        operator: Backend to list
        path: Normalized directory path or glob pattern
        options: Listing options, ignored for recursion when globbing

    Returns:
        Async iterator of entries, in backend order

    Raises:
        StorageError: If the pattern is malformed or the backend fails
    """
    options = options or ListOptions()

    prefix = literal_prefix(path)
    if prefix is None:
        return operator.list(path, options)

    pattern = compile_glob(path)
    logger.debug(
        "Listing glob %s on %s from prefix '%s'", path, operator.name, prefix
    )
    entries = operator.list(as_directory(prefix), replace(options, recursive=True))
    return _filter_matches(entries, pattern.matches)


async def _filter_matches(
    entries: AsyncIterator[StorageEntry], matches: Callable[[str], bool]
) -> AsyncIterator[StorageEntry]:
    async for entry in entries:
        if entry.is_dir or matches(entry.path):
            yield entry


async def list_entries(
    operator: StorageOperatorProtocol,
    path: str,
    options: ListOptions | None = None,
) -> list[StorageEntry]:
    """List entries under a path eagerly.

    Same semantics as ``lister`` but collects every entry before returning.
    """
    entries = await lister(operator, path, options)
    return [entry async for entry in entries]
