"""JSON helpers used when preparing request bodies."""
from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any


def is_plain_object(value: Any) -> bool:
    """Return ``True`` for plain mappings such as ``dict`` instances."""

    return isinstance(value, Mapping)


def safe_json_stringify(value: Any) -> str | None:
    """Encode ``value`` as JSON, returning ``None`` when it cannot be encoded."""

    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        return None


def encode_body(body: Any) -> str | bytes | None:
    """Turn a provider body into what goes on the wire.

    ``str`` and ``bytes`` are sent unchanged, plain mappings are JSON-encoded
    (``"{}"`` when encoding fails), and any other value is sent as JSON when it
    can be encoded and dropped otherwise.
    """

    if body is None or isinstance(body, (str, bytes)):
        return body
    if isinstance(body, bytearray):
        return bytes(body)
    if is_plain_object(body):
        return safe_json_stringify(body) or "{}"
    return safe_json_stringify(body)


__all__ = ["encode_body", "is_plain_object", "safe_json_stringify"]
