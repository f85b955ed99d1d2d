from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Union

from streamhttp.client.response import STATUS_CODE_KEY

STATUS_LINE_PREFIX = "HTTP/"


class LineKind(str, Enum):
    HEADER = "header"
    STATUS = "status"
    OPAQUE = "opaque"


@dataclass(frozen=True, slots=True)
class ClassifiedLine:
    """One raw metadata line and what it was recognized as.

    For HEADER, name/value are the normalized pair. For STATUS, value is the
    status code token. For OPAQUE, only raw is meaningful.
    """

    kind: LineKind
    raw: str
    name: Optional[str] = None
    value: Optional[str] = None


Classifier = Callable[[str], Optional[ClassifiedLine]]


def _classify_header(line: str) -> Optional[ClassifiedLine]:
    name, sep, value = line.partition(":")
    if not sep:
        return None
    return ClassifiedLine(
        kind=LineKind.HEADER, raw=line, name=name.strip().lower(), value=value.strip()
    )


def _classify_status(line: str) -> Optional[ClassifiedLine]:
    if not line.startswith(STATUS_LINE_PREFIX):
        return None
    parts = line.split(None, 2)
    # A bare "HTTP/1.1" carries no code.
    code = parts[1] if len(parts) > 1 else ""
    return ClassifiedLine(kind=LineKind.STATUS, raw=line, value=code)


# Order matters: a line with a colon is a header even if it starts with HTTP/.
CLASSIFIERS: List[Classifier] = [_classify_header, _classify_status]


def classify_line(line: str) -> ClassifiedLine:
    """Classify one raw metadata line. Never raises."""

    for classifier in CLASSIFIERS:
        result = classifier(line)
        if result is not None:
            return result
    return ClassifiedLine(kind=LineKind.OPAQUE, raw=line)


def parse_metadata(lines: Optional[Iterable[str]]) -> Dict[Union[str, int], str]:
    """Turn raw metadata lines into a header map.

    - Header lines: lower-cased name -> trimmed value, last one wins.
    - Status lines: code token stored under ``http_code``, last one wins
      (intermediate redirect responses are overwritten by the final one).
    - Anything else is kept under the next integer index (0, 1, ...).

    Missing or empty metadata yields an empty map.
    """

    headers: Dict[Union[str, int], str] = {}
    if not lines:
        return headers

    opaque_index = 0
    for line in lines:
        item = classify_line(line)
        if item.kind is LineKind.HEADER:
            headers[item.name] = item.value
        elif item.kind is LineKind.STATUS:
            headers[STATUS_CODE_KEY] = item.value
        else:
            headers[opaque_index] = item.raw
            opaque_index += 1
    return headers
