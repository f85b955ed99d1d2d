from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

_TRUE = {"1", "true", "TRUE", "yes", "YES", "on", "ON"}
_FALSE = {"0", "false", "FALSE", "no", "NO", "off", "OFF"}


@dataclass(frozen=True, slots=True)
class TransportConfig:
    """Defaults for the stream transport.

    These values form the floor of every composed context option bag;
    per-request options override them.

    Security notes:
    - verify_peer is False by default. Set STREAMHTTP_VERIFY_PEER=1 (or pass
      verify_peer=True) to verify server certificates.

    """

    verify_peer: bool = False
    timeout: Optional[float] = None
    follow_location: bool = True
    max_redirects: int = 20
    user_agent: Optional[str] = None
    log_level: str = "WARNING"

    @staticmethod
    def from_env() -> "TransportConfig":
        """Create a config from environment variables.

        - STREAMHTTP_VERIFY_PEER (default 0)
        - STREAMHTTP_TIMEOUT (seconds, default unset)
        - STREAMHTTP_FOLLOW_LOCATION (default 1)
        - STREAMHTTP_MAX_REDIRECTS (default 20)
        - STREAMHTTP_USER_AGENT (default unset)
        - STREAMHTTP_LOG_LEVEL (default WARNING)

        Invalid values fall back to the defaults.
        """

        return TransportConfig(
            verify_peer=_env_bool("STREAMHTTP_VERIFY_PEER", False),
            timeout=_env_float("STREAMHTTP_TIMEOUT", None),
            follow_location=_env_bool("STREAMHTTP_FOLLOW_LOCATION", True),
            max_redirects=_env_int("STREAMHTTP_MAX_REDIRECTS", 20),
            user_agent=(os.environ.get("STREAMHTTP_USER_AGENT", "").strip() or None),
            log_level=_env_log_level("STREAMHTTP_LOG_LEVEL", "WARNING"),
        )


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    return default


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable."""

    raw = os.environ.get(name, "").strip()
    if not raw:
        return int(default)
    try:
        return int(raw)
    except ValueError:
        return int(default)


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _env_log_level(name: str, default: str) -> str:
    raw = os.environ.get(name, "").strip().upper()
    if raw and isinstance(logging.getLevelName(raw), int):
        return raw
    return default
