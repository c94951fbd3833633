from __future__ import annotations


def block_count(content_length: int, block_size: int) -> int:
    """Number of blocks covering `content_length` bytes (ceil division)."""
    return -(-content_length // block_size)


def block_length(index: int, content_length: int, block_size: int) -> int:
    """True stored length of block `index`; only the final block may be short."""
    return max(0, min(block_size, content_length - index * block_size))


def block_span(offset: int, length: int, block_size: int) -> tuple[int, int, int, int]:
    """Return (first_block, first_start, last_block, last_end) for `[offset, offset+length)`.

    `last_end` is the offset of the last requested byte inside `last_block`.
    """
    first_block, first_start = divmod(offset, block_size)
    last_block, last_end = divmod(offset + length - 1, block_size)
    return first_block, first_start, last_block, last_end
