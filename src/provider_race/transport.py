"""HTTP transport seam and the default ``requests`` based implementation."""
from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any, Protocol

import requests

from .errors import TransportError
from .signals import AbortSignal

if TYPE_CHECKING:
    from .provider import ApiProvider


class HeadersProtocol(Protocol):
    def items(self) -> Iterable[tuple[str, str]]: ...


class TransportResponse(Protocol):
    """Subset of :class:`requests.Response` the race relies on."""

    status_code: int
    headers: HeadersProtocol

    @property
    def text(self) -> str: ...
    @property
    def content(self) -> bytes: ...
    def json(self) -> Any: ...


class HttpTransport(Protocol):
    async def __call__(
        self,
        url: str,
        *,
        method: str,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        signal: AbortSignal | None = None,
    ) -> TransportResponse: ...


ProxyFn = Callable[["ApiProvider", AbortSignal | None], Awaitable[TransportResponse]]


class RequestsTransport:
    """Send requests through a :class:`requests.Session` on a worker thread.

    A blocking call cannot be interrupted once it is on the wire, so the
    abort signal is honoured at the edges: sends that start after an abort
    are rejected and a response arriving after one is closed and discarded.
    """

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        timeout: float | None = 30.0,
    ) -> None:
        self._session = session if session is not None else requests.Session()
        self._timeout = timeout

    async def __call__(
        self,
        url: str,
        *,
        method: str,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        signal: AbortSignal | None = None,
    ) -> TransportResponse:
        return await asyncio.to_thread(
            self._send,
            url,
            method=method,
            body=body,
            headers=headers,
            signal=signal,
        )

    def _send(
        self,
        url: str,
        *,
        method: str,
        body: Any,
        headers: Mapping[str, str] | None,
        signal: AbortSignal | None,
    ) -> TransportResponse:
        if signal is not None and signal.aborted:
            raise TransportError(f"{method} {url} aborted before sending")
        try:
            response = self._session.request(
                method,
                url,
                data=body,
                headers=dict(headers) if headers is not None else None,
                timeout=self._timeout,
            )
        except requests.exceptions.RequestException as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc
        except (TypeError, ValueError) as exc:
            # raised by requests while preparing an unsendable request
            raise TransportError(f"{method} {url} could not be sent: {exc}") from exc
        if signal is not None and signal.aborted:
            response.close()
            raise TransportError(f"{method} {url} aborted")
        return response

    def close(self) -> None:
        self._session.close()


__all__ = [
    "HeadersProtocol",
    "HttpTransport",
    "ProxyFn",
    "RequestsTransport",
    "TransportResponse",
]
