"""Streaming byte transfer between two storage operators."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .models import WriteOptions


if TYPE_CHECKING:
    from opcopy.protocols import StorageOperatorProtocol


logger = logging.getLogger(__name__)


async def transfer(
    source: StorageOperatorProtocol,
    source_path: str,
    destination: StorageOperatorProtocol,
    destination_path: str,
    content_type: str | None = None,
) -> int:
    """Stream one object's bytes from a source to a destination backend.

    Chunks are written in order as they are read, so the object is never
    held in memory as a whole. The sink is closed once, after the last chunk.
    On failure the sink is aborted and nothing is deleted.

    Args:
        source: Operator to read from
        source_path: File path on the source
        destination: Operator to write to
        destination_path: File path on the destination
        content_type: Content type attached to the written object

    Returns:
        Number of bytes transferred

    Raises:
        StorageError: If opening, reading, writing or closing fails
    """
    logger.debug(
        "Transferring %s:%s -> %s:%s",
        source.name,
        source_path,
        destination.name,
        destination_path,
    )

    chunks = await source.open_reader(source_path)
    try:
        sink = await destination.open_writer(
            destination_path, WriteOptions(content_type=content_type)
        )

        bytes_written = 0
        try:
            async for chunk in chunks:
                await sink.write(chunk)
                bytes_written += len(chunk)
        except BaseException:
            await sink.abort()
            raise
    finally:
        aclose = getattr(chunks, "aclose", None)
        if aclose is not None:
            await aclose()

    await sink.close()

    logger.debug("Transferred %d bytes to %s", bytes_written, destination_path)
    return bytes_written
