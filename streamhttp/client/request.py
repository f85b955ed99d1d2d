from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence, Union
from urllib.parse import urlencode

from streamhttp.client.collections import CookieCollection, HeaderCollection

# Free-form, caller-supplied transport directive values.
OptionValue = Union[
    None,
    bool,
    int,
    float,
    str,
    bytes,
    Sequence["OptionValue"],
    Mapping[str, "OptionValue"],
]

# Methods whose params travel in the query string rather than in the body.
QUERY_METHODS = frozenset({"GET", "HEAD"})

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass
class Request:
    """Transport-agnostic HTTP request description.

    Fields:
      method: HTTP verb, any case.
      url: absolute URL, or a path resolved against base_url.
      params: query/form parameters.
      headers: request headers.
      cookies: request cookies, sent as a single Cookie header.
      content: raw body bytes for body-bearing methods.
      options: free-form transport directives, passed through to the transport.

    """

    method: str = "GET"
    url: str = ""
    base_url: Optional[str] = None
    params: Dict[str, Any] = field(default_factory=dict)
    headers: HeaderCollection = field(default_factory=HeaderCollection)
    cookies: CookieCollection = field(default_factory=CookieCollection)
    content: Optional[bytes] = None
    options: Dict[str, OptionValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.headers, HeaderCollection):
            self.headers = HeaderCollection(self.headers)
        if not isinstance(self.cookies, CookieCollection):
            self.cookies = CookieCollection(self.cookies)
        if isinstance(self.content, str):
            self.content = self.content.encode("utf-8")

    def full_url(self, include_params: bool = False) -> str:
        """Compose the target URL.

        A relative url is joined to base_url. With include_params, params are
        url-encoded and appended with ``?`` (or ``&`` if a query already exists).
        """

        url = self.url or ""
        if self.base_url and "://" not in url:
            if url:
                url = self.base_url.rstrip("/") + "/" + url.lstrip("/")
            else:
                url = self.base_url

        if include_params and self.params:
            query = urlencode(self.params, doseq=True)
            url += ("&" if "?" in url else "?") + query
        return url

    def prepare(self) -> "Request":
        """Fill the body from params for body-bearing methods.

        Only applies when no explicit content was set.
        """

        if self.method.upper() in QUERY_METHODS:
            return self
        if self.content is None and self.params:
            self.content = urlencode(self.params, doseq=True).encode("ascii")
            if not self.headers.has("Content-Type"):
                self.headers.set("Content-Type", FORM_CONTENT_TYPE)
        return self
