"""Local file readers using mmap."""

import io
import logging
import mmap
from pathlib import Path
from typing import BinaryIO, Union

from ..core.model import ReadResult
from .base import SeekableReader

LOG = logging.getLogger(__name__)


class LocalReader(SeekableReader):
    """Random-access reader over a local file, a binary file object or bytes.

    Offers the same `seek`/`read_at`/`readinto` surface as `RangeStream`, so
    code written against a remote stream can be pointed at a local copy.
    """

    def __init__(self, source: Union[Path, str, BinaryIO, bytes, bytearray], logger: logging.Logger | None = None):
        self.bytes_fetched = 0
        self.requests_made = 0
        self._cursor = 0
        self._log = logger or LOG
        self._file = None
        self._mmap = None
        self._data = None  # For in-memory sources
        self._should_close_file = False

        if isinstance(source, (bytes, bytearray, memoryview)):
            self._data = bytes(source)
        elif hasattr(source, 'read'):
            # BinaryIO object
            self._file = source
            if isinstance(source, io.BytesIO):
                self._data = source.getvalue()
        else:
            # Path or str
            self._file = open(source, 'rb')
            self._should_close_file = True

    def _ensure_mmap(self):
        """Create mmap on first access."""
        if self._mmap is not None or self._data is not None:
            return
        if not self._file.seekable():
            raise IOError("File is not seekable, cannot use mmap")
        self._file.seek(0, 2)  # Seek to end
        if self._file.tell() == 0:
            # mmap refuses empty files
            self._data = b""
            return
        try:
            self._mmap = mmap.mmap(self._file.fileno(), 0, access=mmap.ACCESS_READ)
        except (io.UnsupportedOperation, OSError):
            # Fallback for file objects without a usable fileno()
            self._file.seek(0)
            self._data = self._file.read()

    @property
    def _source(self):
        self._ensure_mmap()
        return self._mmap if self._mmap is not None else self._data

    @property
    def content_length(self) -> int:
        """Return the total size of the source in bytes."""
        return len(self._source)

    def read_at(self, buffer, offset: int) -> ReadResult:
        if offset < 0:
            raise ValueError(f"offset must be non-negative, got {offset}")
        self.requests_made += 1

        view = memoryview(buffer).cast("B")
        source = self._source
        data = source[offset:offset + len(view)]
        count = len(data)
        view[:count] = data
        self.bytes_fetched += count
        eof = count < len(view) or offset + count >= len(source)
        self._log.debug("read_at offset=%d size=%d -> %d bytes (eof=%s)", offset, len(view), count, eof)
        return ReadResult(count, eof)

    def close(self):
        """Close mmap and file if we opened it."""
        if self._mmap is not None:
            self._mmap.close()
            self._mmap = None
        if self._should_close_file and self._file is not None:
            self._file.close()
            self._file = None


def open_local_reader(source: Union[Path, str, BinaryIO, bytes]) -> LocalReader:
    """Create a local random-access reader."""
    return LocalReader(source)
