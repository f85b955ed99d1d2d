from __future__ import annotations

import codecs
import json
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple, Union
from xml.etree.ElementTree import Element

from defusedxml import ElementTree as DefusedET
from defusedxml.common import DefusedXmlException

from streamhttp.exceptions import ResponseFormatError
from streamhttp.client.collections import HeaderCollection

# Reserved parsed-header key holding the status code token.
STATUS_CODE_KEY = "http_code"

ParsedHeaders = Mapping[Union[str, int], str]


@dataclass(frozen=True, slots=True)
class Response:
    """HTTP response wrapper.

    Security notes:
    - Treat `content` as untrusted.
    - XML is parsed with defusedxml (no entity expansion, no external DTDs).

    """

    content: bytes
    headers: HeaderCollection = field(default_factory=HeaderCollection)
    status_code: Optional[str] = None
    extra_lines: Tuple[str, ...] = ()

    @classmethod
    def create(cls, content: bytes, headers: ParsedHeaders) -> "Response":
        """Build a response from body bytes and a parsed header map.

        String keys become headers, the reserved ``http_code`` key becomes
        status_code, and integer keys (opaque metadata lines) are kept in
        extra_lines in index order.
        """

        collection = HeaderCollection()
        status: Optional[str] = None
        extra = []
        for key, value in headers.items():
            if isinstance(key, int):
                extra.append((key, value))
            elif key == STATUS_CODE_KEY:
                status = value
            else:
                collection.set(key, value)
        extra.sort(key=lambda kv: kv[0])
        return cls(
            content=content,
            headers=collection,
            status_code=status,
            extra_lines=tuple(v for _, v in extra),
        )

    @property
    def is_ok(self) -> bool:
        """True for 2xx status codes."""

        return self.status_code is not None and self.status_code.startswith("2")

    @property
    def text(self) -> str:
        return self.content.decode(self._charset(), errors="replace")

    def json(self) -> Any:
        """Decode body as JSON."""

        try:
            return json.loads(self.content.decode(self._charset(), errors="strict"))
        except (UnicodeDecodeError, ValueError) as e:
            raise ResponseFormatError(f"response body is not valid JSON: {e}") from e

    def xml(self) -> Element:
        """Parse body as XML.

        Security notes:
        - Uses defusedxml to avoid entity expansion attacks.

        """

        try:
            return DefusedET.fromstring(self.content)
        except (DefusedET.ParseError, DefusedXmlException) as e:
            raise ResponseFormatError(f"response body is not acceptable XML: {e}") from e

    def _charset(self) -> str:
        ctype = self.headers.get("Content-Type") or ""
        for part in ctype.split(";")[1:]:
            name, _, value = part.strip().partition("=")
            if name.lower() == "charset" and value:
                charset = value.strip('"')
                try:
                    codecs.lookup(charset)
                except LookupError:
                    break
                return charset
        return "utf-8"
