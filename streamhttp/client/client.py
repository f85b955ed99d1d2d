from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from streamhttp.client.collections import CookieCollection, HeaderCollection
from streamhttp.client.request import OptionValue, Request
from streamhttp.client.response import ParsedHeaders, Response
from streamhttp.config import TransportConfig
from streamhttp.transport.base import Transport
from streamhttp.transport.stream import StreamTransport

log = logging.getLogger("streamhttp.client")


class Client:
    """Entry point: builds requests, hands them to a transport, builds responses.

    Example:
      client = Client(base_url="https://api.example.com")
      r = client.get("/items", params={"page": 2})
      if r.is_ok:
          data = r.json()

    Security notes:
    - The default transport does not verify TLS peers unless
      config.verify_peer is set (see TransportConfig.from_env).

    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        transport: Optional[Transport] = None,
        config: Optional[TransportConfig] = None,
    ):
        self.base_url = base_url
        self.config = config or TransportConfig.from_env()
        self.transport = transport or StreamTransport(config=self.config)

        # Host applications may reconfigure this after construction.
        logging.getLogger("streamhttp").setLevel(self.config.log_level)

    def create_request(self, **fields: Any) -> Request:
        fields.setdefault("base_url", self.base_url)
        return Request(**fields)

    def create_response(self, content: bytes, headers: ParsedHeaders) -> Response:
        return Response.create(content, headers)

    def send(self, request: Request) -> Response:
        """Send one request. Only stream establishment failures raise."""

        request.prepare()
        log.debug("client_send", extra={"method": request.method.upper()})
        return self.transport.send(request, self.create_response)

    def batch_send(
        self, requests: Union[Mapping[str, Request], Iterable[Request]]
    ) -> Union[Dict[str, Response], List[Response]]:
        """Send several requests sequentially, preserving keys or order."""

        if isinstance(requests, Mapping):
            for req in requests.values():
                req.prepare()
        else:
            requests = [req.prepare() for req in requests]
        return self.transport.batch_send(requests, self.create_response)

    def get(self, url: str, params=None, headers=None, cookies=None, options=None) -> Response:
        return self._request("GET", url, params, None, headers, cookies, options)

    def head(self, url: str, params=None, headers=None, cookies=None, options=None) -> Response:
        return self._request("HEAD", url, params, None, headers, cookies, options)

    def options(self, url: str, params=None, headers=None, cookies=None, options=None) -> Response:
        return self._request("OPTIONS", url, params, None, headers, cookies, options)

    def post(
        self, url: str, params=None, content=None, headers=None, cookies=None, options=None
    ) -> Response:
        return self._request("POST", url, params, content, headers, cookies, options)

    def put(
        self, url: str, params=None, content=None, headers=None, cookies=None, options=None
    ) -> Response:
        return self._request("PUT", url, params, content, headers, cookies, options)

    def patch(
        self, url: str, params=None, content=None, headers=None, cookies=None, options=None
    ) -> Response:
        return self._request("PATCH", url, params, content, headers, cookies, options)

    def delete(
        self, url: str, params=None, content=None, headers=None, cookies=None, options=None
    ) -> Response:
        return self._request("DELETE", url, params, content, headers, cookies, options)

    def _request(
        self,
        method: str,
        url: str,
        params: Optional[Mapping[str, Any]],
        content: Optional[Union[bytes, str]],
        headers: Optional[Mapping[str, str]],
        cookies: Optional[Mapping[str, str]],
        options: Optional[Mapping[str, OptionValue]],
    ) -> Response:
        req = self.create_request(
            method=method,
            url=url,
            params=dict(params or {}),
            headers=HeaderCollection(headers),
            cookies=CookieCollection(cookies),
            content=content,
            options=dict(options or {}),
        )
        return self.send(req)
