"""Tests for local file I/O."""

import io
import tempfile
from pathlib import Path

import pytest

from httpseek.core.model import ReadResult
from httpseek.io.base import ReaderAt, SeekableReader
from httpseek.io.local import LocalReader, open_local_reader


class TestLocalReader:
    """Test the local random-access reader."""

    def test_read_at(self):
        """Test basic read_at operations."""
        test_data = b"0123456789"

        with tempfile.NamedTemporaryFile() as f:
            f.write(test_data)
            f.flush()

            reader = LocalReader(f.name)
            buf = bytearray(5)
            assert reader.read_at(buf, 0) == ReadResult(5, False)
            assert bytes(buf) == b"01234"
            assert reader.read_at(buf, 5) == ReadResult(5, True)
            assert bytes(buf) == b"56789"

            # Check bytes_fetched accounting
            assert reader.bytes_fetched == 10
            assert reader.requests_made == 2

            reader.close()

    def test_short_read_signals_eof(self):
        reader = LocalReader(b"0123456789")
        buf = bytearray(8)
        assert reader.read_at(buf, 6) == ReadResult(4, True)
        assert bytes(buf[:4]) == b"6789"
        assert reader.read_at(buf, 20) == ReadResult(0, True)

    def test_binary_io_source(self):
        """Test using BinaryIO as source."""
        reader = LocalReader(io.BytesIO(b"0123456789"))
        assert reader.content_length == 10
        assert reader.read(4) == b"0123"
        reader.close()

    def test_path_source(self):
        """Test using Path as source."""
        with tempfile.NamedTemporaryFile(delete=False) as f:
            f.write(b"0123456789")
            temp_path = Path(f.name)

        try:
            with LocalReader(temp_path) as reader:
                assert reader.content_length == 10
                reader.seek(3, io.SEEK_END)
                assert reader.read() == b"789"
        finally:
            temp_path.unlink()

    def test_empty_file(self):
        """Test that an empty file reads as immediately at end."""
        with tempfile.NamedTemporaryFile() as f:
            reader = LocalReader(f.name)
            assert reader.content_length == 0
            assert reader.read_at(bytearray(4), 0) == ReadResult(0, True)
            reader.close()

    def test_cursor(self):
        reader = LocalReader(b"abcdefghij")
        assert reader.seek(2) == 2
        assert reader.readinto(bytearray(3)) == ReadResult(3, False)
        assert reader.tell() == 5
        assert reader.seek(-1, io.SEEK_CUR) == 4
        assert reader.read(2) == b"ef"
        assert reader.seek(100) == 100
        assert reader.read(2) == b""
        with pytest.raises(ValueError):
            reader.seek(0, 3)

    def test_memoryview_buffer(self):
        reader = LocalReader(b"abcdefghij")
        backing = bytearray(10)
        view = memoryview(backing)[2:6]
        assert reader.read_at(view, 0) == ReadResult(4, False)
        assert backing == b"\x00\x00abcd\x00\x00\x00\x00"

    def test_negative_offset(self):
        with pytest.raises(ValueError):
            LocalReader(b"abc").read_at(bytearray(1), -1)

    def test_base_requires_read_at(self):
        with pytest.raises(TypeError):
            SeekableReader()

    def test_protocol(self):
        assert isinstance(LocalReader(b"abc"), ReaderAt)

    def test_factory_function(self):
        reader = open_local_reader(b"0123456789")
        assert isinstance(reader, LocalReader)
        assert reader.read(3) == b"012"
