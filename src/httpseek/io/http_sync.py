"""Synchronous HTTP range streams using requests."""

import logging
from typing import Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..core.blockcache import BlockCache
from ..core.config import SeekConfig
from ..core.model import (
    CapabilityError,
    ProbeResult,
    ProtocolMismatchError,
    RangeNotSupportedError,
    ReadResult,
    ResourceChangedError,
    ShortReadError,
    TransportError,
)
from .base import SeekableReader

LOG = logging.getLogger(__name__)


# Module-level session for connection pooling
_session = None


def _create_session(config: SeekConfig) -> requests.Session:
    session = requests.Session()
    retry_strategy = Retry(
        total=config.retries,
        backoff_factor=config.backoff_factor,
        status_forcelist=[500, 502, 503, 504],
        allowed_methods=["HEAD", "GET"],
    )
    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def _get_session():
    """Get or create the global requests session."""
    global _session
    if _session is None:
        _session = _create_session(SeekConfig())
    return _session


class HTTPTransport:
    """The HTTP side of a stream: a metadata probe and raw request execution.

    Retries, redirects and connection pooling all belong to the underlying
    `requests.Session`; nothing here retries on its own.
    """

    def __init__(self, session: Optional[requests.Session] = None, config: Optional[SeekConfig] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config or SeekConfig()
        self._log = logger or LOG
        if session is not None:
            self.session = session
            self._owns_session = False
        elif config is None:
            self.session = _get_session()
            self._owns_session = False
        else:
            self.session = _create_session(self.config)
            self._owns_session = True

    def probe(self, url: str) -> ProbeResult:
        """HEAD `url` and report its length, range support and version token."""
        self._log.debug("probe %s", url)
        try:
            response = self.session.head(url, headers=self.config.headers,
                                         timeout=self.config.timeout, allow_redirects=True)
            response.close()
            response.raise_for_status()
        except requests.RequestException as e:
            raise TransportError(f"HEAD request failed: {e}") from e

        content_length = None
        content_length_header = response.headers.get("Content-Length")
        if content_length_header:
            try:
                content_length = int(content_length_header)
            except ValueError:
                raise CapabilityError(f"Invalid Content-Length {content_length_header!r} for {url}") from None

        accepts_ranges = response.headers.get("Accept-Ranges", "").lower() == "bytes"

        # ETag wins over Last-Modified; echoed back as If-Range on every range request
        version_token = response.headers.get("ETag") or response.headers.get("Last-Modified") or ""

        result = ProbeResult(url=url, content_length=content_length,
                             accepts_ranges=accepts_ranges, version_token=version_token)
        self._log.debug("probe %s -> %s", url, result)
        return result

    def do(self, request: requests.Request) -> requests.Response:
        """Send `request` and return the response, body not yet consumed."""
        try:
            prepared = self.session.prepare_request(request)
            return self.session.send(prepared, timeout=self.config.timeout, allow_redirects=True)
        except requests.RequestException as e:
            raise TransportError(f"{request.method} {request.url} failed: {e}") from e

    def close(self):
        if self._owns_session:
            self.session.close()


class RangeFetcher:
    """Random-access reader issuing one ranged GET per `read_at` call.

    Every request carries `If-Range` with the version token captured at open
    time (when the server gave one), so a resource that changed underneath the
    stream is reported instead of silently mixed into earlier reads.
    """

    def __init__(self, transport: HTTPTransport, url: str, content_length: int, version_token: str = "",
                 headers: Optional[Dict[str, str]] = None, logger: Optional[logging.Logger] = None):
        self.transport = transport
        self.url = url
        self.content_length = content_length
        self.version_token = version_token
        self._headers = dict(headers or {})
        self._log = logger or LOG
        self.bytes_fetched = 0
        self.requests_made = 0

    def build_request(self, offset: int, length: int) -> requests.Request:
        """Request for `length` bytes at `offset`; the Range end is inclusive."""
        end = min(offset + length, self.content_length) - 1
        headers = dict(self._headers)
        headers["Range"] = f"bytes={offset}-{end}"
        if self.version_token:
            headers["If-Range"] = self.version_token
        return requests.Request("GET", self.url, headers=headers)

    def read_at(self, buffer, offset: int) -> ReadResult:
        if offset < 0:
            raise ValueError(f"offset must be non-negative, got {offset}")

        view = memoryview(buffer).cast("B")
        size = len(view)
        if offset >= self.content_length:
            return ReadResult(0, True)
        if size == 0:
            return ReadResult(0, False)

        request = self.build_request(offset, size)
        self._log.debug("GET %s Range: %s", self.url, request.headers["Range"])

        response = self.transport.do(request)
        self.requests_made += 1
        try:
            if response.status_code != 206:
                if response.status_code == 200 and self.version_token:
                    raise ResourceChangedError(
                        f"{self.url} no longer matches version {self.version_token}", response.status_code)
                raise ProtocolMismatchError(
                    f"Range request for {self.url} returned status {response.status_code}", response.status_code)
            data = response.content
        except requests.RequestException as e:
            raise TransportError(f"Reading range body failed: {e}") from e
        finally:
            response.close()

        expected = min(size, self.content_length - offset)
        count = min(len(data), size)
        if count < expected:
            raise ShortReadError(
                f"Range request for {self.url} at offset {offset} returned {count} of {expected} bytes",
                expected, count)
        view[:count] = data[:count]
        self.bytes_fetched += count
        eof = offset + count >= self.content_length
        self._log.debug("GET %s offset=%d -> %d bytes (eof=%s)", self.url, offset, count, eof)
        return ReadResult(count, eof)


class RangeStream(SeekableReader):
    """Seekable, random-access view of a remote resource.

    Reads go straight to a `RangeFetcher` or, with `block_size > 0`, through a
    `BlockCache` that is created on the first read. Not thread-safe.
    """

    def __init__(self, fetcher: RangeFetcher, *, block_size: int = 0, close_transport: bool = False,
                 logger: Optional[logging.Logger] = None):
        if block_size < 0:
            raise ValueError(f"block_size must be non-negative, got {block_size}")
        if block_size > 0 and fetcher.content_length <= 0:
            raise ValueError(f"cannot buffer {fetcher.url}: content length is {fetcher.content_length}")

        self.fetcher = fetcher
        self.block_size = block_size
        self.close_transport = close_transport
        self.closed = False
        self._cache: Optional[BlockCache] = None
        self._cursor = 0
        self._log = logger or LOG

    @property
    def url(self) -> str:
        return self.fetcher.url

    @property
    def content_length(self) -> int:
        return self.fetcher.content_length

    @property
    def version_token(self) -> str:
        return self.fetcher.version_token

    @property
    def bytes_fetched(self) -> int:
        return self.fetcher.bytes_fetched

    @property
    def requests_made(self) -> int:
        """Ranged GETs issued so far (the open-time HEAD is not counted)."""
        return self.fetcher.requests_made

    @property
    def cache(self) -> Optional[BlockCache]:
        if self.block_size and self._cache is None:
            self._cache = BlockCache(self.content_length, self.block_size, self.fetcher, logger=self._log)
        return self._cache

    def read_at(self, buffer, offset: int) -> ReadResult:
        if self.closed:
            raise ValueError("I/O operation on closed stream")
        if self.block_size:
            return self.cache.read_at(buffer, offset)
        return self.fetcher.read_at(buffer, offset)

    def close(self):
        if self.closed:
            return
        self.closed = True
        if self.close_transport:
            self.fetcher.transport.close()
        self._log.debug("closed %s", self.url)

    def __repr__(self):
        return f"<RangeStream url={self.url!r} length={self.content_length} block_size={self.block_size}>"


class SeekClient:
    """Opens range streams, sharing one HTTP session across them."""

    def __init__(self, config: Optional[SeekConfig] = None, session: Optional[requests.Session] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config or SeekConfig()
        self._log = logger or LOG
        self.transport = HTTPTransport(session=session, config=config, logger=self._log)

    def open(self, url: str, *, block_size: Optional[int] = None, close_transport: bool = False) -> RangeStream:
        """Probe `url` and return a stream over it.

        Raises:
            RangeNotSupportedError: server does not advertise byte ranges
            CapabilityError: server does not report a content length
            TransportError: the probe itself failed
        """
        probe = self.transport.probe(url)
        if not probe.accepts_ranges:
            raise RangeNotSupportedError(url)
        if probe.content_length is None:
            raise CapabilityError(f"Could not determine content length for {url}")

        fetcher = RangeFetcher(self.transport, url, probe.content_length, probe.version_token,
                               headers=self.config.headers, logger=self._log)
        if block_size is None:
            block_size = self.config.block_size
        return RangeStream(fetcher, block_size=block_size, close_transport=close_transport, logger=self._log)

    def close(self):
        self.transport.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def open_http_stream(url: str, *, block_size: Optional[int] = None, config: Optional[SeekConfig] = None,
                     session: Optional[requests.Session] = None,
                     logger: Optional[logging.Logger] = None) -> RangeStream:
    """Open a seekable range stream over `url`."""
    client = SeekClient(config=config, session=session, logger=logger)
    return client.open(url, block_size=block_size, close_transport=True)
