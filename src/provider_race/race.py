"""Sequential provider race with per-attempt timeouts and fallback."""
from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
import math
import time
from typing import Any, Union

from .errors import ConfigError, ConstructionError, ExhaustedError, TimeoutError
from .normalize import ProviderResponse, parse_response
from .observability import EventLogger, resolve_event_logger
from .provider import ApiProvider
from .serialization import encode_body
from .signals import AbortController, AbortSignal
from .transport import HttpTransport, ProxyFn, RequestsTransport, TransportResponse

_NUMERIC_OPTIONS = ("timeout_per_attempt_s", "timeout_s", "max_attempts", "max_retry")


@dataclass(frozen=True)
class RaceConfig:
    """Policy options for :class:`ApiRace`.

    ``timeout_per_attempt_s`` cancels the attempt task and aborts its signal.
    The default :class:`RequestsTransport` cannot interrupt a blocking call
    already on the wire, so its worker thread stays busy until the session
    timeout ends and ``asyncio.run`` waits for it on shutdown.

    ``timeout_s``, ``max_attempts`` and ``max_retry`` are accepted and
    validated but reserved: the attempt loop does not consult them.
    ``retry_on_fail`` moves on to the *next* provider after a failure rather
    than repeating the failed one.
    """

    timeout_per_attempt_s: float | None = None
    retry_on_fail: bool = False
    timeout_s: float | None = None
    max_attempts: int | None = None
    max_retry: int | None = None
    transport: ProxyFn | None = None

    def __post_init__(self) -> None:
        for option in _NUMERIC_OPTIONS:
            value = getattr(self, option)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(f"{option} must be a number")
            if value < 0:
                raise ConfigError(f"{option} must be non-negative")
        if not isinstance(self.retry_on_fail, bool):
            raise ConfigError("retry_on_fail must be a boolean")
        if self.transport is not None and not callable(self.transport):
            raise ConfigError("transport must be callable")

    @property
    def attempt_timeout(self) -> float | None:
        # zero disables the timer
        return self.timeout_per_attempt_s or None


@dataclass(frozen=True)
class PrioritizedProvider:
    provider: ApiProvider
    priority: int


ProviderList = Union[
    Sequence[ApiProvider],
    Mapping[str, Union[PrioritizedProvider, Mapping[str, Any]]],
]

AttemptCall = Callable[[AbortSignal | None], Awaitable[TransportResponse]]


def _flatten_priority_mapping(
    entries: Mapping[str, PrioritizedProvider | Mapping[str, Any]],
) -> tuple[ApiProvider, ...]:
    providers: list[ApiProvider] = []
    for key, entry in entries.items():
        if isinstance(entry, PrioritizedProvider):
            provider: Any = entry.provider
            priority: Any = entry.priority
        elif isinstance(entry, Mapping):
            provider = entry.get("provider")
            priority = entry.get("priority")
        else:
            raise ConstructionError(f"Invalid providers list: entry {key!r}")
        if not isinstance(provider, ApiProvider):
            raise ConstructionError(f"Invalid providers list: entry {key!r}")
        provider.priority = priority
        providers.append(provider)
    return tuple(providers)


def normalize_providers(providers: ProviderList) -> tuple[ApiProvider, ...]:
    """Collapse both accepted provider shapes into one ordered tuple."""

    if isinstance(providers, Mapping):
        return _flatten_priority_mapping(providers)
    if isinstance(providers, (str, bytes)) or not isinstance(providers, Iterable):
        raise ConstructionError("Invalid providers list")
    items = tuple(providers)
    if not all(isinstance(item, ApiProvider) for item in items):
        raise ConstructionError("Invalid providers list")
    return items


def _insertion_index(priority: int | float, size: int) -> int:
    if math.isnan(priority):
        return 0
    if math.isinf(priority):
        return size if priority > 0 else 0
    return int(priority)


def order_providers(providers: Iterable[ApiProvider]) -> tuple[ApiProvider, ...]:
    """Order providers by positional priority insertion.

    Providers without a priority are appended; a provider with priority ``P``
    is inserted at index ``P`` of the list built so far, shifting whatever
    already sits there to the right.
    """

    ordered: list[ApiProvider] = []
    for provider in providers:
        priority = provider.priority
        if priority is None:
            ordered.append(provider)
        else:
            ordered.insert(_insertion_index(priority, len(ordered)), provider)
    return tuple(ordered)


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def _consume_result(task: asyncio.Future[Any]) -> None:
    if not task.cancelled():
        task.exception()


async def call_with_timeout(
    call: AttemptCall,
    timeout_s: float,
    *,
    label: str,
) -> TransportResponse:
    """Race ``call`` against a timer, aborting its signal when the timer wins."""

    controller = AbortController()
    task = asyncio.ensure_future(call(controller.signal))
    try:
        done, _ = await asyncio.wait({task}, timeout=timeout_s)
    except asyncio.CancelledError:
        controller.abort("cancelled")
        task.cancel()
        raise
    if task in done:
        return task.result()

    controller.abort("timeout")
    task.add_done_callback(_consume_result)
    task.cancel()
    raise TimeoutError(f"Request timeout: {label} did not respond within {timeout_s}s")


class ApiRace:
    """Try providers one after another until one produces a response."""

    def __init__(
        self,
        providers: ProviderList,
        config: RaceConfig | None = None,
        *,
        logger: EventLogger | None = None,
        http_transport: HttpTransport | None = None,
        **options: Any,
    ) -> None:
        self._providers = normalize_providers(providers)
        if config is None:
            config = RaceConfig(**options)
        elif options:
            config = replace(config, **options)
        self._config = config
        self._logger = resolve_event_logger(logger)
        self._http_transport = http_transport
        self._owned_transport: RequestsTransport | None = None

    async def __aenter__(self) -> ApiRace:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Release the default transport if this race created it."""

        owned = self._owned_transport
        if owned is None:
            return
        self._owned_transport = None
        self._http_transport = None
        owned.close()

    @property
    def providers(self) -> tuple[ApiProvider, ...]:
        return self._providers

    @property
    def config(self) -> RaceConfig:
        return self._config

    def ordered_providers(self) -> tuple[ApiProvider, ...]:
        return order_providers(self._providers)

    async def run(self) -> ProviderResponse:
        ordered = self.ordered_providers()
        total = len(ordered)
        failures: list[tuple[str, BaseException]] = []

        for attempt, provider in enumerate(ordered, start=1):
            started = time.monotonic()
            try:
                response = await self._request(provider)
            except Exception as err:
                failures.append((provider.name, err))
                self._log_failure(provider, err, attempt=attempt, total=total, started=started)
                if self._config.retry_on_fail:
                    continue
                raise
            self._logger.emit(
                "provider_call",
                {
                    "provider": provider.name,
                    "attempt": attempt,
                    "total_providers": total,
                    "status": "ok",
                    "response_status": response.response_status,
                    "latency_ms": _elapsed_ms(started),
                },
            )
            return response

        self._logger.emit(
            "race_exhausted",
            {
                "attempts": len(failures),
                "providers": [name for name, _ in failures],
            },
        )
        last_error = failures[-1][1] if failures else None
        raise ExhaustedError(failures=failures) from last_error

    async def _request(self, provider: ApiProvider) -> ProviderResponse:
        http = provider.http
        body = encode_body(http.body)

        proxy = self._config.transport
        if proxy is not None:
            runner = proxy

            def call(signal: AbortSignal | None) -> Awaitable[TransportResponse]:
                return runner(provider, signal)

        else:
            transport = self._resolve_http_transport()

            def call(signal: AbortSignal | None) -> Awaitable[TransportResponse]:
                return transport(
                    http.url,
                    method=http.method,
                    body=body,
                    headers=http.headers,
                    signal=signal,
                )

        timeout_s = self._config.attempt_timeout
        if timeout_s is None:
            raw = await call(None)
        else:
            raw = await call_with_timeout(call, timeout_s, label=provider.name)
        return parse_response(raw, provider)

    def _resolve_http_transport(self) -> HttpTransport:
        if self._http_transport is None:
            self._owned_transport = RequestsTransport()
            self._http_transport = self._owned_transport
        return self._http_transport

    def _log_failure(
        self,
        provider: ApiProvider,
        error: BaseException,
        *,
        attempt: int,
        total: int,
        started: float,
    ) -> None:
        latency_ms = _elapsed_ms(started)
        self._logger.emit(
            "provider_call",
            {
                "provider": provider.name,
                "attempt": attempt,
                "total_providers": total,
                "status": "error",
                "latency_ms": latency_ms,
            },
        )
        self._logger.emit(
            "provider_failed",
            {
                "provider": provider.name,
                "attempt": attempt,
                "error_type": type(error).__name__,
                "error_message": str(error),
                "fallback": self._config.retry_on_fail,
            },
        )


__all__ = [
    "ApiRace",
    "PrioritizedProvider",
    "ProviderList",
    "RaceConfig",
    "call_with_timeout",
    "normalize_providers",
    "order_providers",
]
