"""Provider descriptors describing one candidate HTTP endpoint."""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any
from urllib.parse import quote, urljoin, urlsplit, urlunsplit


class ResponseType(str, Enum):
    """Content types a provider may declare for its response body."""

    JSON = "application/json"
    XML = "text/xml"
    TEXT = "text/plain"
    PROTOBUF = "x-application/protobuf"
    FORM_URLENCODED = "application/x-www-form-urlencoded"
    OCTET_STREAM = "application/octet-stream"


# characters left intact by URI component escaping
_COMPONENT_SAFE = "!~*'()"


@dataclass(frozen=True)
class HttpRequest:
    """Read-only view of the request a provider describes."""

    method: str
    url: str
    pathname: str
    search: Mapping[str, str] | None = None
    body: Any = None
    headers: Mapping[str, str] | None = None


def encode_search_params(params: Mapping[str, str]) -> str:
    """Serialize ``params`` as ``key=value`` pairs with the values escaped."""

    return "&".join(
        f"{key}={quote(str(value), safe=_COMPONENT_SAFE)}" for key, value in params.items()
    )


def _readonly(mapping: Mapping[str, Any] | None) -> Mapping[str, Any] | None:
    if mapping is None:
        return None
    if isinstance(mapping, dict):
        return MappingProxyType(mapping)
    return mapping


class ApiProvider:
    """One endpoint expected to return data equivalent to its peers.

    Only :attr:`priority` may change after construction.  A race that receives
    providers as a priority mapping writes the priority here, so one
    descriptor must not be shared by races running at the same time.
    """

    def __init__(
        self,
        *,
        name: str,
        url: str,
        pathname: str,
        response_type: ResponseType | str,
        method: str = "GET",
        search: Mapping[str, str] | None = None,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        priority: int | None = None,
    ) -> None:
        self._name = name
        self._method = method
        self._url = url
        self._pathname = pathname
        self._search = search
        self._body = body
        self._headers = headers
        self._response_type = response_type
        self._priority: int | float | None = None
        if priority is not None:
            self.priority = priority

    @property
    def name(self) -> str:
        return self._name

    @property
    def response_type(self) -> ResponseType | str:
        return self._response_type

    @property
    def priority(self) -> int | float | None:
        return self._priority

    @priority.setter
    def priority(self, value: int | float) -> None:
        # non-numeric assignments are ignored
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return
        self._priority = value

    def remove_priority(self) -> None:
        self._priority = None

    @property
    def http(self) -> HttpRequest:
        """Build the effective request; recomputed on every access."""

        target = urljoin(self._url, self._pathname)
        if self._search is not None:
            scheme, netloc, path, _, fragment = urlsplit(target)
            target = urlunsplit(
                (scheme, netloc, path, encode_search_params(self._search), fragment)
            )

        return HttpRequest(
            method=self._method,
            url=target,
            pathname=self._pathname,
            search=_readonly(self._search),
            body=self._body,
            headers=_readonly(self._headers),
        )

    def __repr__(self) -> str:
        response_type = getattr(self._response_type, "value", self._response_type)
        return (
            f"ApiProvider(name={self._name!r}, method={self._method!r}, "
            f"response_type={response_type!r})"
        )


__all__ = ["ApiProvider", "HttpRequest", "ResponseType", "encode_search_params"]
