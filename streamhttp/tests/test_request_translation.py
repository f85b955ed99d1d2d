import pytest

from streamhttp.client.request import Request
from streamhttp.config import TransportConfig
from streamhttp.transport.stream import StreamTransport

BASE = "http://example.test/api"


def _request(method: str, **kwargs) -> Request:
    return Request(
        method=method,
        url="/items",
        base_url=BASE,
        params={"page": 2, "tag": ["a", "b"]},
        content=b'{"name": "x"}',
        **kwargs,
    )


@pytest.mark.parametrize("method", ["GET", "HEAD", "get", "Head"])
def test_query_methods_fold_params_and_send_no_body(method):
    url, options = StreamTransport(TransportConfig()).translate(_request(method))

    assert url == BASE + "/items?page=2&tag=a&tag=b"
    assert "content" not in options["http"]
    assert options["http"]["method"] == method.upper()


@pytest.mark.parametrize("method", ["POST", "PUT", "PATCH", "DELETE", "PURGE", "post", "brew"])
def test_body_methods_attach_content_and_keep_params_out_of_url(method):
    url, options = StreamTransport(TransportConfig()).translate(_request(method))

    assert url == BASE + "/items"
    assert options["http"]["content"] == b'{"name": "x"}'
    assert options["http"]["method"] == method.upper()


def test_body_method_without_content_sends_empty_body():
    req = Request(method="POST", url="http://example.test/submit")
    _, options = StreamTransport(TransportConfig()).translate(req)
    assert options["http"]["content"] == b""


def test_cookie_line_is_always_appended():
    req = Request(method="GET", url="http://example.test/")
    _, options = StreamTransport(TransportConfig()).translate(req)

    assert options["http"]["header"] == ["Cookie: "]


def test_headers_and_cookies_are_serialized():
    req = Request(
        method="POST",
        url="http://example.test/",
        headers={"content-type": "application/json", "X-Trace": ["1", "2"]},
        cookies={"sid": "abc", "theme": "dark mode"},
    )
    _, options = StreamTransport(TransportConfig()).translate(req)

    assert options["http"]["header"] == [
        "Content-Type: application/json",
        "X-Trace: 1",
        "X-Trace: 2",
        "Cookie: sid=abc; theme=dark+mode",
    ]


def test_framing_defaults():
    _, options = StreamTransport(TransportConfig()).translate(_request("GET"))

    assert options["http"]["ignore_errors"] is True
    assert options["ssl"]["verify_peer"] is False


def test_verify_peer_comes_from_config():
    _, options = StreamTransport(TransportConfig(verify_peer=True)).translate(_request("GET"))
    assert options["ssl"]["verify_peer"] is True


def test_request_options_are_merged_into_http_group():
    req = _request("POST", options={"timeout": 2.5, "proxy": "tcp://proxy:3128"})
    _, options = StreamTransport(TransportConfig()).translate(req)

    assert options["http"]["timeout"] == 2.5
    assert options["http"]["proxy"] == "tcp://proxy:3128"
    assert options["http"]["method"] == "POST"
    assert options["http"]["content"] == b'{"name": "x"}'
    assert options["http"]["header"][-1] == "Cookie: "


def test_request_options_can_explicitly_override_framing():
    req = _request("GET", options={"method": "OPTIONS", "ignore_errors": False})
    url, options = StreamTransport(TransportConfig()).translate(req)

    assert options["http"]["method"] == "OPTIONS"
    assert options["http"]["ignore_errors"] is False
    # URL framing was computed for GET.
    assert url.endswith("?page=2&tag=a&tag=b")


def test_translate_does_not_validate_urls():
    req = Request(method="GET", url="not a url at all")
    url, _ = StreamTransport(TransportConfig()).translate(req)
    assert url == "not a url at all"
