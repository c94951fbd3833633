from __future__ import annotations
from dataclasses import dataclass
from typing import NamedTuple


class ReadResult(NamedTuple):
    count: int      # bytes copied into the caller's buffer
    eof: bool       # read reached the end of the resource


@dataclass(slots=True, frozen=True)
class ProbeResult:
    url: str
    content_length: int | None
    accepts_ranges: bool
    version_token: str          # ETag, else Last-Modified, else ""


class HTTPSeekError(Exception):
    """Base class for all httpseek errors."""
    pass


class CapabilityError(HTTPSeekError):
    """Raised when a remote resource cannot be opened for random access."""
    pass


class RangeNotSupportedError(CapabilityError):
    """Raised when the server does not advertise `Accept-Ranges: bytes`."""

    def __init__(self, url: str):
        super().__init__(f"Range header not supported by {url}")
        self.url = url


class TransportError(HTTPSeekError, IOError):
    """Raised when the HTTP round trip itself fails (DNS, TLS, connection, bad URL)."""
    pass


class ProtocolMismatchError(HTTPSeekError):
    """Raised when a ranged request is not answered with 206 Partial Content."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ResourceChangedError(ProtocolMismatchError):
    """Raised when `If-Range` no longer matches and the server sent the whole entity."""
    pass


class ShortReadError(ProtocolMismatchError):
    """Raised when fewer bytes arrive than were requested and the end was not reached."""

    def __init__(self, message: str, expected: int, received: int):
        super().__init__(message, 206)
        self.expected = expected
        self.received = received
