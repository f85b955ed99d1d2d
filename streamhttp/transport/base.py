from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Union

from streamhttp.client.request import Request
from streamhttp.client.response import ParsedHeaders, Response
from streamhttp.config import TransportConfig

ResponseFactory = Callable[[bytes, ParsedHeaders], Response]


class Transport(ABC):
    """Base class for transports that perform the actual network I/O.

    Subclasses implement `send`; the compose_* helpers turn the request
    model into the pieces a low-level primitive needs.
    """

    def __init__(self, config: Optional[TransportConfig] = None):
        self.config = config or TransportConfig()

    def compose_url(self, request: Request, include_params: bool = False) -> str:
        return request.full_url(include_params=include_params)

    def compose_headers(self, request: Request) -> List[str]:
        return request.headers.to_lines()

    def compose_cookies(self, request: Request) -> str:
        return request.cookies.to_header_value()

    @abstractmethod
    def send(self, request: Request, create_response: ResponseFactory = Response.create) -> Response:
        """Perform one round trip and build the response."""

    def batch_send(
        self,
        requests: Union[Mapping[str, Request], Iterable[Request]],
        create_response: ResponseFactory = Response.create,
    ) -> Union[Dict[str, Response], List[Response]]:
        """Send several requests one after another.

        Keys (for a mapping) or order (for an iterable) are preserved. The
        first transport failure propagates.
        """

        if isinstance(requests, Mapping):
            return {key: self.send(req, create_response) for key, req in requests.items()}
        return [self.send(req, create_response) for req in requests]
