"""streamhttp: an HTTP client whose transport is a single blocking urllib stream per request."""

from .client import Client, Cookie, CookieCollection, HeaderCollection, Request, Response
from .config import TransportConfig
from .exceptions import (
    HttpClientError,
    ResponseFormatError,
    StreamOpenError,
    StreamReadError,
    TransportError,
)
from .transport import StreamTransport, Transport, merge_options, parse_metadata

__all__ = [
    "Client",
    "Cookie",
    "CookieCollection",
    "HeaderCollection",
    "Request",
    "Response",
    "TransportConfig",
    "HttpClientError",
    "TransportError",
    "StreamOpenError",
    "StreamReadError",
    "ResponseFormatError",
    "Transport",
    "StreamTransport",
    "merge_options",
    "parse_metadata",
]
