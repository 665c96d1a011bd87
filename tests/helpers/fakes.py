from __future__ import annotations

import asyncio
from collections.abc import Mapping
import json
from typing import Any

from requests.structures import CaseInsensitiveDict

from provider_race.provider import ApiProvider
from provider_race.signals import AbortSignal


class FakeResponse:
    """Response double that counts every body access."""

    def __init__(
        self,
        *,
        status_code: int = 200,
        payload: Any = None,
        text: str | None = None,
        content: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self.status_code = status_code
        self.headers = CaseInsensitiveDict(headers or {})
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self._text = text
        self._content = content if content is not None else text.encode("utf-8")
        self.body_reads = 0
        self.closed = False

    def json(self) -> Any:
        self.body_reads += 1
        return json.loads(self._text)

    @property
    def text(self) -> str:
        self.body_reads += 1
        return self._text

    @property
    def content(self) -> bytes:
        self.body_reads += 1
        return self._content

    def close(self) -> None:
        self.closed = True


class FakeTransport:
    """HTTP transport double keyed by URL prefix."""

    def __init__(self, routes: Mapping[str, Any] | None = None, *, delay: float = 0.0) -> None:
        self._routes = dict(routes or {})
        self._delay = delay
        self.calls: list[dict[str, Any]] = []
        self.signals: list[AbortSignal | None] = []
        self.cancelled = False

    def route(self, prefix: str, outcome: Any) -> None:
        self._routes[prefix] = outcome

    async def __call__(
        self,
        url: str,
        *,
        method: str,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        signal: AbortSignal | None = None,
    ) -> FakeResponse:
        self.calls.append({"url": url, "method": method, "body": body, "headers": headers})
        self.signals.append(signal)
        if self._delay:
            try:
                await asyncio.sleep(self._delay)
            except asyncio.CancelledError:
                self.cancelled = True
                raise
        for prefix, outcome in self._routes.items():
            if url.startswith(prefix):
                if isinstance(outcome, BaseException):
                    raise outcome
                return outcome
        raise AssertionError(f"unexpected url {url}")

    def urls(self) -> list[str]:
        return [call["url"] for call in self.calls]


class CapturingLogger:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def emit(self, event_type: str, record: Mapping[str, Any]) -> None:
        self.events.append((event_type, dict(record)))

    def of_type(self, event_type: str) -> list[dict[str, Any]]:
        return [payload for kind, payload in self.events if kind == event_type]


def make_provider(
    name: str,
    *,
    priority: int | None = None,
    response_type: str = "application/json",
    **kwargs: Any,
) -> ApiProvider:
    return ApiProvider(
        name=name,
        url=kwargs.pop("url", f"https://{name}.example.com"),
        pathname=kwargs.pop("pathname", "/v1/data"),
        response_type=response_type,
        priority=priority,
        **kwargs,
    )


__all__ = ["CapturingLogger", "FakeResponse", "FakeTransport", "make_provider"]
