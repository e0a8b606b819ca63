"""Tests for the streaming transfer primitive."""

from unittest.mock import AsyncMock, call

import pytest

from opcopy.adapters import create_memory_operator
from opcopy.core.errors import ErrorKind, StorageError
from opcopy.core.file_operations import WriteOptions
from opcopy.core.file_operations.transfer import transfer


class TestTransfer:
    """Test transfer between operators."""

    @pytest.mark.asyncio
    async def test_bytes_are_copied_exactly(self, source, destination):
        """Test that destination bytes equal source bytes."""
        data = bytes(range(256)) * 1000
        source.put("blob.bin", data)

        transferred = await transfer(source, "blob.bin", destination, "copy.bin")

        assert transferred == len(data)
        assert destination.get("copy.bin") == data

    @pytest.mark.asyncio
    async def test_content_type_is_propagated(self, source, destination):
        """Test that the content type hint reaches the written object."""
        source.put("page.html", "<html></html>")

        await transfer(source, "page.html", destination, "page.html", "text/html")

        entry = await destination.stat("page.html")
        assert entry.content_type == "text/html"

    @pytest.mark.asyncio
    async def test_chunks_written_in_order(self, mock_operator, mock_sink):
        """Test that every chunk is written in order before one close."""
        source = create_memory_operator(name="chunked", chunk_size=2)
        source.put("file.txt", "abcdef")
        mock_operator.open_writer.return_value = mock_sink

        transferred = await transfer(source, "file.txt", mock_operator, "out.txt")

        assert transferred == 6
        assert mock_sink.write.await_args_list == [
            call(b"ab"),
            call(b"cd"),
            call(b"ef"),
        ]
        mock_sink.close.assert_awaited_once()
        mock_sink.abort.assert_not_awaited()
        mock_operator.open_writer.assert_awaited_once_with(
            "out.txt", WriteOptions(content_type=None)
        )

    @pytest.mark.asyncio
    async def test_write_failure_aborts_sink(self, source, mock_operator, mock_sink):
        """Test that a failed write aborts the sink and is never closed."""
        source.put("file.txt", "data")
        mock_sink.write.side_effect = StorageError(
            ErrorKind.PERMISSION_DENIED, "denied"
        )
        mock_operator.open_writer.return_value = mock_sink

        with pytest.raises(StorageError) as exc_info:
            await transfer(source, "file.txt", mock_operator, "out.txt")

        assert exc_info.value.kind is ErrorKind.PERMISSION_DENIED
        mock_sink.abort.assert_awaited_once()
        mock_sink.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_read_failure_aborts_sink(self, mock_operator, destination):
        """Test that a failed read midway aborts the sink."""

        async def _failing_reader():
            yield b"first"
            raise StorageError(ErrorKind.UNEXPECTED, "connection reset")

        mock_operator.open_reader = AsyncMock(return_value=_failing_reader())
        sink = AsyncMock()
        destination_operator = AsyncMock()
        destination_operator.name = "destination"
        destination_operator.open_writer.return_value = sink

        with pytest.raises(StorageError, match="connection reset"):
            await transfer(mock_operator, "in.txt", destination_operator, "out.txt")

        sink.write.assert_awaited_once_with(b"first")
        sink.abort.assert_awaited_once()
        sink.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_source_opens_no_writer(self, source, mock_operator):
        """Test that a missing source fails before the sink is opened."""
        with pytest.raises(StorageError) as exc_info:
            await transfer(source, "missing.txt", mock_operator, "out.txt")

        assert exc_info.value.kind is ErrorKind.NOT_FOUND
        mock_operator.open_writer.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_transfer_leaves_no_partial_object(
        self, source, destination
    ):
        """Test that an aborted memory sink commits nothing."""
        sink = await destination.open_writer("out.txt")
        await sink.write(b"partial")
        await sink.abort()

        assert destination.paths() == []
