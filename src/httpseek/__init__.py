"""httpseek - seekable, random-access reads over HTTP Range requests."""

from io import SEEK_SET, SEEK_CUR, SEEK_END

from .core.blockcache import BlockCache
from .core.config import SeekConfig
from .core.model import (
    ReadResult, ProbeResult,
    HTTPSeekError, CapabilityError, RangeNotSupportedError,
    TransportError, ProtocolMismatchError, ResourceChangedError,
)
from .io import open_reader, LocalReader, RangeStream, SeekClient, open_http_stream


def open_stream(url: str, *, block_size: int | None = None, config: SeekConfig | None = None,
                session=None, logger=None) -> RangeStream:
    """Open `url` for random access; fails when the server does not accept ranges."""
    return open_http_stream(url, block_size=block_size, config=config, session=session, logger=logger)


__all__ = [
    "open_stream", "open_reader",
    "RangeStream", "SeekClient", "LocalReader", "BlockCache", "SeekConfig",
    "ReadResult", "ProbeResult",
    "HTTPSeekError", "CapabilityError", "RangeNotSupportedError",
    "TransportError", "ProtocolMismatchError", "ResourceChangedError",
    "SEEK_SET", "SEEK_CUR", "SEEK_END",
]
