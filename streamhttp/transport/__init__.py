"""Transports: turn a Request into network I/O and raw metadata back into headers."""

from .base import Transport
from .metadata import ClassifiedLine, LineKind, classify_line, parse_metadata
from .opener import UrllibStream, open_stream
from .options import compose_context_options, default_context_options, merge_options
from .stream import StreamTransport

__all__ = [
    "Transport",
    "StreamTransport",
    "ClassifiedLine",
    "LineKind",
    "classify_line",
    "parse_metadata",
    "UrllibStream",
    "open_stream",
    "compose_context_options",
    "default_context_options",
    "merge_options",
]
