from __future__ import annotations
import logging
from typing import Dict

from .model import ReadResult, ShortReadError
from .util import block_count, block_length, block_span

LOG = logging.getLogger(__name__)


class BlockCache:
    """Block-aligned read cache in front of a random-access reader.

    Every read is widened to whole blocks of `block_size` bytes. Each block is
    fetched from `reader` the first time it is touched and kept for the lifetime
    of the cache; the requested slice is then cut out of the cached blocks.
    Adjacent missing blocks are fetched one request each.

    With `block_size == 0` the cache is a pass-through and every read goes
    straight to `reader`.

    Not safe for concurrent use.
    """

    def __init__(self, content_length: int, block_size: int, reader, logger: logging.Logger | None = None):
        if block_size < 0:
            raise ValueError(f"block_size must be non-negative, got {block_size}")
        if reader is None:
            raise ValueError("reader not set")
        if block_size > 0 and (content_length is None or content_length <= 0):
            raise ValueError(f"content_length must be positive when buffering, got {content_length}")

        self.content_length = content_length
        self.block_size = block_size
        self.reader = reader
        self.blocks: Dict[int, bytes] = {}
        self.blocks_fetched = 0
        self._log = logger or LOG

    @property
    def block_count(self) -> int:
        if self.block_size == 0:
            return 0
        return block_count(self.content_length, self.block_size)

    def _fetch_block(self, index: int) -> bytes:
        length = block_length(index, self.content_length, self.block_size)
        start = index * self.block_size
        buf = bytearray(length)
        count, eof = self.reader.read_at(buf, start)
        self.blocks_fetched += 1
        if count < length:
            # Block lengths are exact, the final one included
            raise ShortReadError(
                f"block {index} at offset {start}: got {count} of {length} bytes (eof={eof})", length, count)
        block = bytes(buf[:count])
        self.blocks[index] = block
        self._log.debug("filled block %d from offset %d (%d bytes)", index, start, len(block))
        return block

    def read_at(self, buffer, offset: int) -> ReadResult:
        """Fill `buffer` from offset `offset`, fetching missing blocks as needed."""
        if self.block_size == 0:
            self.blocks_fetched += 1
            return self.reader.read_at(buffer, offset)

        if offset < 0:
            raise ValueError(f"offset must be non-negative, got {offset}")

        view = memoryview(buffer).cast("B")
        size = len(view)
        if offset >= self.content_length:
            return ReadResult(0, True)
        if size == 0:
            return ReadResult(0, False)

        total = self.block_count
        first_block, first_start, last_block, last_end = block_span(offset, size, self.block_size)
        if last_block >= total:
            last_block = total - 1
            last_end = block_length(last_block, self.content_length, self.block_size) - 1

        self._log.debug("read_at offset=%d size=%d blocks %d..%d", offset, size, first_block, last_block)

        out = bytearray()
        for index in range(first_block, last_block + 1):
            block = self.blocks.get(index)
            if block is None:
                block = self._fetch_block(index)

            start = first_start if index == first_block else 0
            end = last_end + 1 if index == last_block else len(block)
            out += block[start:end]

        count = min(len(out), size)
        view[:count] = out[:count]
        eof = offset + count >= self.content_length
        self._log.debug("read_at offset=%d -> %d bytes (eof=%s)", offset, count, eof)
        return ReadResult(count, eof)
