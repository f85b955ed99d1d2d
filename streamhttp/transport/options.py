from __future__ import annotations

from typing import Any, Dict, Mapping

from streamhttp.client.request import OptionValue
from streamhttp.config import TransportConfig

# Option groups of a context option bag.
HTTP = "http"
SSL = "ssl"

ContextOptions = Dict[str, Dict[str, OptionValue]]


def default_context_options(method: str, config: TransportConfig) -> ContextOptions:
    """Build the option floor for one request.

    ignore_errors is always on so that 4xx/5xx responses stay readable.
    Optional config values are only included when set.
    """

    http: Dict[str, OptionValue] = {
        "method": method,
        "ignore_errors": True,
        "follow_location": config.follow_location,
        "max_redirects": config.max_redirects,
    }
    if config.timeout is not None:
        http["timeout"] = config.timeout
    if config.user_agent:
        http["user_agent"] = config.user_agent

    return {
        HTTP: http,
        SSL: {"verify_peer": config.verify_peer},
    }


def compose_context_options(options: Mapping[str, OptionValue]) -> ContextOptions:
    """Nest raw request options under the http group.

    Keys are not validated; the opener decides what it understands.
    """

    composed: ContextOptions = {}
    for key, value in options.items():
        composed.setdefault(HTTP, {})[key] = value
    return composed


def merge_options(base: Mapping[str, Any], user: Mapping[str, Any]) -> Dict[str, Any]:
    """Recursively merge `user` into `base`, returning a new mapping.

    Rules:
    - Both values are mappings: merge them key by key.
    - Otherwise the user value replaces the base value. Sequences are leaves.
    - Keys present only in base are kept.

    Neither input is mutated.
    """

    merged: Dict[str, Any] = {k: _copy_value(v) for k, v in base.items()}
    for key, value in user.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_options(current, value)
        else:
            merged[key] = _copy_value(value)
    return merged


def _copy_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _copy_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_copy_value(v) for v in value]
    return value
