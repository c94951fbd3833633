"""Base protocols and shared cursor logic for I/O layer."""

import logging
from abc import ABC, abstractmethod
from io import SEEK_SET, SEEK_CUR, SEEK_END
from typing import Protocol, runtime_checkable

from ..core.model import ReadResult


@runtime_checkable
class ReaderAt(Protocol):
    """Protocol for random-access readers."""

    def read_at(self, buffer, offset: int) -> ReadResult:
        """Fill `buffer` with bytes starting at absolute offset `offset`.

        Returns the number of bytes copied and whether the read reached the end
        of the resource. A short count is only ever reported together with eof.
        """
        ...


class SeekableReader(ABC):
    """Cursor bookkeeping shared by every reader exposing `read_at`.

    Subclasses set `content_length`, `_cursor` and `_log` and implement `read_at`.
    """

    content_length: int
    _cursor: int = 0
    _log: logging.Logger

    @abstractmethod
    def read_at(self, buffer, offset: int) -> ReadResult:
        ...

    def seekable(self) -> bool:
        return True

    def readable(self) -> bool:
        return True

    def tell(self) -> int:
        return self._cursor

    def seek(self, offset: int, whence: int = SEEK_SET) -> int:
        """Move the cursor and return the new position.

        SEEK_END counts *back* from the end: the new position is
        `content_length - offset`. Positions past the end are kept as-is.
        """
        if whence == SEEK_SET:
            position = offset
        elif whence == SEEK_CUR:
            position = self._cursor + offset
        elif whence == SEEK_END:
            position = self.content_length - offset
        else:
            raise ValueError(f"Invalid whence value: {whence}. Must be SEEK_SET, SEEK_CUR, or SEEK_END.")
        self._log.debug("seek offset=%d whence=%d -> %d", offset, whence, position)
        self._cursor = position
        return position

    def readinto(self, buffer) -> ReadResult:
        """Read into `buffer` at the cursor and advance it by the bytes read."""
        result = self.read_at(buffer, self._cursor)
        self._cursor += result.count
        return result

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            size = max(0, self.content_length - self._cursor)
        buffer = bytearray(size)
        count, _ = self.readinto(buffer)
        return bytes(buffer[:count])

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        pass
