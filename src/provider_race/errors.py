"""Normalized exception hierarchy for provider races."""

from __future__ import annotations

import builtins
from collections.abc import Iterable
from typing import Any


class RaceError(Exception):
    """Base class for race-originated errors."""


class RetryableError(RaceError):
    """Base class for errors where another provider may succeed."""


class FatalError(RaceError):
    """Base class for errors no provider can recover from."""


class TransportError(RetryableError):
    """Raised when the underlying HTTP call fails."""


class TimeoutError(RetryableError, builtins.TimeoutError):
    """Raised when a provider call exceeds the per-attempt timeout."""


class ConstructionError(FatalError, TypeError):
    """Raised when the provider list handed to a race is malformed."""


class ConfigError(FatalError, ValueError):
    """Raised when race options or a configuration file are invalid."""


class UnsupportedContentTypeError(FatalError):
    """Raised for recognized response types that cannot be decoded yet."""

    def __init__(self, message: str, *, response_type: str) -> None:
        super().__init__(message)
        self.response_type = response_type


class InvalidContentTypeError(FatalError):
    """Raised when a provider declares an unknown response type."""

    def __init__(self, message: str, *, response_type: Any) -> None:
        super().__init__(message)
        self.response_type = response_type


class ExhaustedError(FatalError):
    """Raised when every provider in the race has failed."""

    def __init__(
        self,
        message: str = "No providers available",
        *,
        failures: Iterable[tuple[str, BaseException]] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.failures = list(failures) if failures is not None else []


__all__ = [
    "RaceError",
    "RetryableError",
    "FatalError",
    "TransportError",
    "TimeoutError",
    "ConstructionError",
    "ConfigError",
    "UnsupportedContentTypeError",
    "InvalidContentTypeError",
    "ExhaustedError",
]
