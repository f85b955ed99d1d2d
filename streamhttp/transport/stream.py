from __future__ import annotations

import http.client
import logging
import time
from contextlib import closing
from typing import Callable, List, Optional, Tuple
from urllib.parse import urlsplit, urlunsplit

from streamhttp.client.request import QUERY_METHODS, Request
from streamhttp.client.response import STATUS_CODE_KEY, Response
from streamhttp.config import TransportConfig
from streamhttp.exceptions import StreamOpenError, StreamReadError, TransportError
from streamhttp.transport.base import ResponseFactory, Transport
from streamhttp.transport.metadata import parse_metadata
from streamhttp.transport.opener import Stream, open_stream
from streamhttp.transport.options import (
    HTTP,
    ContextOptions,
    compose_context_options,
    default_context_options,
    merge_options,
)

log = logging.getLogger("streamhttp.transport")

Opener = Callable[[str, ContextOptions], Stream]


def _loggable_url(url: str) -> str:
    """Strip query and credentials; query strings often carry tokens."""

    try:
        parts = urlsplit(url)
        netloc = parts.hostname or ""
        if parts.port:
            netloc += f":{parts.port}"
    except ValueError:
        return "<invalid url>"
    return urlunsplit((parts.scheme, netloc, parts.path, "", ""))


class StreamTransport(Transport):
    """Transport that sends each request over a single blocking byte stream.

    One call = one stream: no connection reuse, no partial reads.

    Security notes:
    - Peer verification follows config.verify_peer (off by default).
    - Request bodies and cookie values are never logged.

    """

    def __init__(self, config: Optional[TransportConfig] = None, opener: Opener = open_stream):
        super().__init__(config)
        self._opener = opener

    def translate(self, request: Request) -> Tuple[str, ContextOptions]:
        """Compose the target URL and the context option bag for a request.

        GET and HEAD fold params into the URL and carry no body. Every other
        method, including unknown ones, keeps params out of the URL and sends
        request.content as the body.
        """

        method = request.method.upper()
        options = default_context_options(method, self.config)

        if method in QUERY_METHODS:
            url = self.compose_url(request, include_params=True)
        else:
            url = self.compose_url(request)
            options[HTTP]["content"] = request.content if request.content is not None else b""

        headers = self.compose_headers(request)
        # Sent even when there are no cookies.
        headers.append("Cookie: " + self.compose_cookies(request))
        options[HTTP]["header"] = headers

        user = compose_context_options(request.options)
        for key in user.get(HTTP, {}):
            if key in options[HTTP]:
                log.debug("context_option_override", extra={"option": key})
        return url, merge_options(options, user)

    def execute(self, url: str, options: ContextOptions) -> Tuple[bytes, List[str]]:
        """Open the stream, read the whole body, collect metadata lines.

        The stream is closed on every exit path once it has been opened.
        """

        try:
            stream = self._opener(url, options)
        except TransportError:
            raise
        except (OSError, ValueError, http.client.HTTPException) as e:
            raise StreamOpenError(f"cannot open stream: {e}") from e

        with closing(stream):
            try:
                content = stream.read()
            except (OSError, http.client.HTTPException) as e:
                raise StreamReadError(f"failed reading response body: {e}") from e
            lines = list(getattr(stream, "wrapper_data", None) or [])
        return content, lines

    def send(self, request: Request, create_response: ResponseFactory = Response.create) -> Response:
        url, options = self.translate(request)
        method = options[HTTP].get("method")
        start = time.monotonic()
        try:
            content, lines = self.execute(url, options)
        except TransportError as e:
            log.warning(
                "http_request_failed",
                extra={
                    "method": method,
                    "url": _loggable_url(url),
                    "error": type(e).__name__,
                    "duration_ms": int((time.monotonic() - start) * 1000),
                },
            )
            raise

        headers = parse_metadata(lines)
        response = create_response(content, headers)
        log.info(
            "http_request",
            extra={
                "method": method,
                "url": _loggable_url(url),
                "status_code": headers.get(STATUS_CODE_KEY),
                "duration_ms": int((time.monotonic() - start) * 1000),
                "bytes": len(content),
            },
        )
        return response
