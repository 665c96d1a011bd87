"""Normalize transport responses into :class:`ProviderResponse` values."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .errors import InvalidContentTypeError, UnsupportedContentTypeError
from .forms import decode_form
from .provider import ApiProvider, ResponseType
from .transport import TransportResponse


@dataclass(frozen=True)
class ProviderResponse:
    payload: Any
    provider: str
    response_status: int
    response_headers: dict[str, str] = field(default_factory=dict)


_UNSUPPORTED = {
    ResponseType.OCTET_STREAM: "Octet stream not supported yet",
    ResponseType.PROTOBUF: "Protobuf not supported yet",
}


def resolve_response_type(value: ResponseType | str) -> ResponseType:
    """Map a declared response type onto :class:`ResponseType`."""

    try:
        return ResponseType(value)
    except ValueError:
        raise InvalidContentTypeError(
            f"Invalid response type: {value!r}", response_type=value
        ) from None


def collect_headers(response: TransportResponse) -> dict[str, str]:
    return {str(key).lower(): str(value) for key, value in response.headers.items()}


def _read_payload(
    response: TransportResponse,
    response_type: ResponseType,
    headers: dict[str, str],
) -> Any:
    if response_type is ResponseType.JSON:
        return response.json()
    if response_type is ResponseType.FORM_URLENCODED:
        entries = decode_form(headers.get("content-type"), response.content)
        return {name: str(value) for name, value in entries}
    if response_type is ResponseType.TEXT:
        return {"$text": response.text}
    return {"$xml": response.text}


def parse_response(response: TransportResponse, provider: ApiProvider) -> ProviderResponse:
    """Decode ``response`` according to ``provider.response_type``.

    The response type is checked before the body is touched, so unsupported
    and unknown types never read the payload.
    """

    response_type = resolve_response_type(provider.response_type)
    message = _UNSUPPORTED.get(response_type)
    if message is not None:
        raise UnsupportedContentTypeError(message, response_type=response_type.value)

    headers = collect_headers(response)
    payload = _read_payload(response, response_type, headers)
    return ProviderResponse(
        payload=payload,
        provider=provider.name,
        response_status=int(response.status_code),
        response_headers=headers,
    )


__all__ = ["ProviderResponse", "collect_headers", "parse_response", "resolve_response_type"]
