from __future__ import annotations

import http.client
import logging
import ssl
import urllib.error
import urllib.request
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

from streamhttp.exceptions import StreamOpenError
from streamhttp.transport.options import HTTP, SSL, ContextOptions

log = logging.getLogger("streamhttp.transport")

# http group options understood by open_stream; anything else is ignored.
KNOWN_HTTP_OPTIONS = frozenset(
    {
        "method",
        "header",
        "content",
        "ignore_errors",
        "timeout",
        "follow_location",
        "max_redirects",
        "proxy",
        "user_agent",
    }
)

_HTTP_VERSIONS = {9: "HTTP/0.9", 10: "HTTP/1.0", 11: "HTTP/1.1"}


class Stream(Protocol):
    """A readable byte stream plus the raw protocol lines that produced it."""

    wrapper_data: List[str]

    def read(self) -> bytes: ...

    def close(self) -> None: ...


class UrllibStream:
    """Stream over a urllib response (or an HTTPError carrying one).

    wrapper_data holds one status line plus header lines per response,
    oldest redirect first, final response last.
    """

    def __init__(self, response: Any, wrapper_data: List[str]):
        self._response = response
        self.wrapper_data = wrapper_data

    def read(self) -> bytes:
        return self._response.read()

    def close(self) -> None:
        self._response.close()


class _RecordingRedirectHandler(urllib.request.HTTPRedirectHandler):
    """Redirect handler that keeps the status and headers of every followed hop.

    max_redirects counts the requests in a chain: at most max_redirects - 1
    redirects are followed, so 1 or less follows none. A redirect that is
    not followed comes back as the response itself.
    """

    def __init__(self, follow: bool, max_redirects: int):
        super().__init__()
        self.follow = follow
        self.allowed_hops = max(0, int(max_redirects) - 1)
        self.hops = 0
        # urllib's own loop limits must never trigger before allowed_hops.
        self.max_redirections = self.allowed_hops + 1
        self.max_repeats = self.allowed_hops + 1
        self.wrapper_data: List[str] = []

    def redirect_request(self, req, fp, code, msg, headers, newurl):
        if not self.follow or self.hops >= self.allowed_hops:
            return None
        new = super().redirect_request(req, fp, code, msg, headers, newurl)
        if new is not None:
            self.hops += 1
            self.wrapper_data.extend(wrapper_lines(fp, code, msg, headers))
        return new


def wrapper_lines(response: Any, code: int, reason: str, headers: Any) -> List[str]:
    """Render a response head as raw lines: status line, then ``Name: Value`` lines."""

    version = _HTTP_VERSIONS.get(getattr(response, "version", 11), "HTTP/1.1")
    lines = [f"{version} {code} {reason or ''}".rstrip()]
    if headers is not None:
        lines.extend(f"{name}: {value}" for name, value in headers.items())
    return lines


def _header_pairs(raw: Any) -> List[Tuple[str, str]]:
    """Turn the `header` option (list of lines or a CRLF string) into merged pairs.

    Repeated names are joined, since urllib keeps one value per name.
    """

    if raw is None:
        return []
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("latin-1")
    lines = raw.splitlines() if isinstance(raw, str) else [str(x) for x in raw]

    merged: Dict[str, Tuple[str, List[str]]] = {}
    for line in lines:
        name, sep, value = line.partition(":")
        if not sep or not name.strip():
            log.debug("context_header_skipped", extra={"header_line_len": len(line)})
            continue
        key = name.strip().lower()
        merged.setdefault(key, (name.strip(), []))[1].append(value.strip())

    pairs: List[Tuple[str, str]] = []
    for key, (name, values) in merged.items():
        joiner = "; " if key == "cookie" else ", "
        pairs.append((name, joiner.join(v for v in values if v)))
    return pairs


def _ssl_context(options: Mapping[str, Any]) -> ssl.SSLContext:
    """Build the TLS context from the ssl option group.

    Security notes:
    - verify_peer defaults to False here as well; callers opt in.

    """

    ctx = ssl.create_default_context(cafile=options.get("cafile"), capath=options.get("capath"))
    verify_peer = bool(options.get("verify_peer", False))
    if not verify_peer:
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
    else:
        ctx.check_hostname = bool(options.get("verify_peer_name", True))
    return ctx


def _proxy_handler(proxy: Optional[str]) -> urllib.request.ProxyHandler:
    # An empty mapping disables proxies picked up from the environment.
    if not proxy:
        return urllib.request.ProxyHandler({})
    if proxy.startswith("tcp://"):
        proxy = "http://" + proxy[len("tcp://") :]
    return urllib.request.ProxyHandler({"http": proxy, "https": proxy})


def open_stream(url: str, options: ContextOptions) -> UrllibStream:
    """Open a byte stream for `url` using urllib, configured by context options.

    With http.ignore_errors set, an HTTP error status still yields a readable
    stream. Any failure to establish the stream raises StreamOpenError.
    """

    http_opts: Dict[str, Any] = dict(options.get(HTTP) or {})
    ssl_opts: Dict[str, Any] = dict(options.get(SSL) or {})

    for key in http_opts:
        if key not in KNOWN_HTTP_OPTIONS:
            log.debug("context_option_ignored", extra={"option": key})

    method = str(http_opts.get("method") or "GET").upper()
    content = http_opts.get("content")
    if isinstance(content, str):
        content = content.encode("utf-8")

    max_redirects = http_opts.get("max_redirects")

    try:
        redirects = _RecordingRedirectHandler(
            follow=bool(http_opts.get("follow_location", True)),
            max_redirects=20 if max_redirects is None else max_redirects,
        )
        req = urllib.request.Request(url, data=content, method=method)
        for name, value in _header_pairs(http_opts.get("header")):
            req.add_header(name, value)
        user_agent = http_opts.get("user_agent")
        if user_agent and not req.has_header("User-agent"):
            req.add_header("User-Agent", str(user_agent))

        opener = urllib.request.build_opener(
            _proxy_handler(http_opts.get("proxy")),
            urllib.request.HTTPSHandler(context=_ssl_context(ssl_opts)),
            redirects,
        )
        kwargs: Dict[str, Any] = {}
        if http_opts.get("timeout") is not None:
            kwargs["timeout"] = float(http_opts["timeout"])
        response = opener.open(req, **kwargs)
    except urllib.error.HTTPError as e:
        if not http_opts.get("ignore_errors", False):
            e.close()
            raise StreamOpenError(f"HTTP error status {e.code}: {e.reason}") from e
        response = e
    except (urllib.error.URLError, OSError, ValueError, TypeError, http.client.HTTPException) as e:
        # TypeError: a badly typed option (e.g. a non-iterable header, non-bytes content).
        raise StreamOpenError(f"cannot open stream: {e}") from e

    status = getattr(response, "status", None) or getattr(response, "code", 0)
    # HTTPError.reason may be urllib's own message; use the server's phrase.
    reason = getattr(getattr(response, "fp", None), "reason", None)
    if not isinstance(reason, str):
        phrase = str(response.reason or "").splitlines()
        reason = phrase[-1] if phrase else ""
    wrapper = list(redirects.wrapper_data)
    wrapper.extend(wrapper_lines(response, status, reason, response.headers))
    return UrllibStream(response, wrapper)
