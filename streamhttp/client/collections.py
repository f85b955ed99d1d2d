from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union
from urllib.parse import quote_plus

HeaderSource = Union[Mapping[str, Union[str, Iterable[str]]], Iterable[Tuple[str, str]]]


def normalize_header_name(name: str) -> str:
    """Render a header name in Dash-Title-Case (``content-type`` -> ``Content-Type``)."""

    return "-".join(part.capitalize() for part in name.strip().replace(" ", "-").split("-"))


class HeaderCollection:
    """Ordered, case-insensitive, multi-valued header collection.

    Names keep the casing they were first added with; lookups ignore case.
    """

    def __init__(self, headers: Optional[HeaderSource] = None):
        # lower name -> (display name, values)
        self._items: Dict[str, Tuple[str, List[str]]] = {}
        if headers:
            self.update(headers)

    def update(self, headers: HeaderSource) -> "HeaderCollection":
        pairs = headers.items() if isinstance(headers, Mapping) else headers
        for name, value in pairs:
            if isinstance(value, (list, tuple)):
                for v in value:
                    self.add(name, v)
            else:
                self.add(name, value)
        return self

    def add(self, name: str, value: str) -> "HeaderCollection":
        """Append a value, keeping any existing ones."""

        key = name.strip().lower()
        if key in self._items:
            self._items[key][1].append(str(value))
        else:
            self._items[key] = (name.strip(), [str(value)])
        return self

    def set(self, name: str, value: str) -> "HeaderCollection":
        """Replace all values of a header."""

        key = name.strip().lower()
        display = self._items[key][0] if key in self._items else name.strip()
        self._items[key] = (display, [str(value)])
        return self

    def get(self, name: str, default: Optional[str] = None, first: bool = True) -> Optional[str]:
        entry = self._items.get(name.strip().lower())
        if entry is None or not entry[1]:
            return default
        return entry[1][0] if first else entry[1][-1]

    def get_all(self, name: str) -> List[str]:
        entry = self._items.get(name.strip().lower())
        return list(entry[1]) if entry else []

    def has(self, name: str) -> bool:
        return name.strip().lower() in self._items

    def remove(self, name: str) -> None:
        self._items.pop(name.strip().lower(), None)

    def items(self) -> Iterator[Tuple[str, List[str]]]:
        for display, values in self._items.values():
            yield display, list(values)

    def to_dict(self) -> Dict[str, List[str]]:
        return {display: list(values) for display, values in self._items.values()}

    def to_lines(self) -> List[str]:
        """Serialize to raw ``Name: Value`` lines, one per value."""

        lines: List[str] = []
        for display, values in self._items.values():
            name = normalize_header_name(display)
            for value in values:
                lines.append(f"{name}: {value}")
        return lines

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return (display for display, _ in self._items.values())

    def __repr__(self) -> str:
        return f"HeaderCollection({self.to_dict()!r})"


@dataclass(frozen=True, slots=True)
class Cookie:
    """A request cookie (name and value only; attributes belong to Set-Cookie)."""

    name: str
    value: str = ""


class CookieCollection:
    """Ordered cookie collection keyed by name. Adding an existing name replaces it."""

    def __init__(self, cookies: Optional[Union[Mapping[str, str], Iterable[Cookie]]] = None):
        self._cookies: Dict[str, Cookie] = {}
        if cookies:
            if isinstance(cookies, Mapping):
                for name, value in cookies.items():
                    self.add(Cookie(name=name, value=str(value)))
            else:
                for cookie in cookies:
                    self.add(cookie)

    def add(self, cookie: Cookie) -> "CookieCollection":
        self._cookies[cookie.name] = cookie
        return self

    def get(self, name: str) -> Optional[Cookie]:
        return self._cookies.get(name)

    def has(self, name: str) -> bool:
        return name in self._cookies

    def remove(self, name: str) -> None:
        self._cookies.pop(name, None)

    def to_header_value(self) -> str:
        """Serialize into a single ``Cookie`` header value.

        Values are form-url-encoded; an empty collection yields ``""``.
        """

        return "; ".join(f"{c.name}={quote_plus(c.value)}" for c in self._cookies.values())

    def __len__(self) -> int:
        return len(self._cookies)

    def __iter__(self) -> Iterator[Cookie]:
        return iter(list(self._cookies.values()))

    def __repr__(self) -> str:
        return f"CookieCollection({list(self._cookies.values())!r})"
