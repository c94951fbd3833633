"""I/O layer for httpseek - random-access readers over HTTP and local sources."""

# Re-export these for import convenience
from .base import ReaderAt, SeekableReader
from .local import LocalReader, open_local_reader
from .http_sync import HTTPTransport, RangeFetcher, RangeStream, SeekClient, open_http_stream


def open_reader(source, *, block_size: int | None = None, **kwargs):
    """Factory function to create the appropriate reader based on source type.

    URLs open a `RangeStream` (extra keyword arguments go to `open_http_stream`);
    everything else is read locally and `block_size` is ignored.
    """
    if hasattr(source, 'read') or isinstance(source, (bytes, bytearray, memoryview)):
        return open_local_reader(source)

    source_str = str(source)
    if source_str.startswith(('http://', 'https://')):
        return open_http_stream(source_str, block_size=block_size, **kwargs)
    else:
        return open_local_reader(source)
