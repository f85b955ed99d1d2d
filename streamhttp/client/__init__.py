"""Request/response model and the high-level client.

Security notes:
- Treat response bodies and headers as untrusted input.
- Avoid printing or logging request bodies or cookie values.
"""

from .collections import Cookie, CookieCollection, HeaderCollection
from .request import OptionValue, Request
from .response import Response
from .client import Client

__all__ = [
    "Client",
    "Cookie",
    "CookieCollection",
    "HeaderCollection",
    "OptionValue",
    "Request",
    "Response",
]
