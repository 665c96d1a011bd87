"""Decode form bodies into ordered ``(name, value)`` entries."""
from __future__ import annotations

from email.parser import BytesParser
from email.policy import HTTP
from urllib.parse import parse_qsl

FORM_URLENCODED = "application/x-www-form-urlencoded"
MULTIPART_FORM_DATA = "multipart/form-data"


def _media_type(content_type: str | None) -> str:
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def _charset(content_type: str | None, default: str = "utf-8") -> str:
    if not content_type:
        return default
    for parameter in content_type.split(";")[1:]:
        key, _, value = parameter.partition("=")
        if key.strip().lower() == "charset" and value.strip():
            return value.strip().strip('"')
    return default


def _decode_multipart(content_type: str, body: bytes) -> list[tuple[str, str]]:
    head = f"Content-Type: {content_type}\r\n\r\n".encode("latin-1")
    message = BytesParser(policy=HTTP).parsebytes(head + body)
    if not message.is_multipart():
        raise ValueError("Malformed multipart/form-data body")

    entries: list[tuple[str, str]] = []
    for part in message.iter_parts():
        name = part.get_param("name", header="content-disposition")
        if name is None:
            continue
        payload = part.get_payload(decode=True) or b""
        charset = part.get_content_charset() or "utf-8"
        entries.append((str(name), payload.decode(charset, errors="replace")))
    return entries


def decode_form(content_type: str | None, body: bytes) -> list[tuple[str, str]]:
    """Return the form entries of ``body`` in document order.

    Both ``application/x-www-form-urlencoded`` and ``multipart/form-data``
    bodies are understood; anything else raises :class:`ValueError`.
    """

    media_type = _media_type(content_type)
    if media_type == MULTIPART_FORM_DATA:
        return _decode_multipart(content_type or "", body)
    if media_type == FORM_URLENCODED:
        text = body.decode(_charset(content_type), errors="replace")
        return parse_qsl(text, keep_blank_values=True)
    raise ValueError(f"Cannot decode form data from content type {content_type!r}")


__all__ = ["FORM_URLENCODED", "MULTIPART_FORM_DATA", "decode_form"]
