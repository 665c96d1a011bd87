"""YAML loader for provider lists and race options."""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError
from .observability import EventLogger
from .provider import ApiProvider
from .race import ApiRace, RaceConfig
from .transport import HttpTransport

__all__ = ["RaceSettings", "load_race_config", "parse_race_config"]

_RACE_OPTIONS = (
    "timeout_per_attempt_s",
    "retry_on_fail",
    "timeout_s",
    "max_attempts",
    "max_retry",
)


@dataclass(frozen=True)
class RaceSettings:
    """Providers and options loaded from a configuration document."""

    providers: tuple[ApiProvider, ...]
    race: RaceConfig = field(default_factory=RaceConfig)

    def build_race(
        self,
        *,
        logger: EventLogger | None = None,
        http_transport: HttpTransport | None = None,
        **options: Any,
    ) -> ApiRace:
        return ApiRace(
            list(self.providers),
            self.race,
            logger=logger,
            http_transport=http_transport,
            **options,
        )


def _coerce_path(config: str | Path | PathLike[str]) -> Path:
    if isinstance(config, Path):
        return config
    if isinstance(config, (str, PathLike)):
        return Path(config)
    raise ConfigError("Config path must be a string or Path instance.")


def _validate_str(data: Mapping[str, Any], field_name: str, *, where: str) -> str:
    value = data.get(field_name)
    if not isinstance(value, str) or not value:
        raise ConfigError(f"{where}: '{field_name}' must be a non-empty string.")
    return value


def _optional_str_mapping(
    data: Mapping[str, Any], field_name: str, *, where: str
) -> dict[str, str] | None:
    value = data.get(field_name)
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ConfigError(f"{where}: '{field_name}' must be a mapping.")
    return {str(key): str(item) for key, item in value.items()}


def _optional_priority(data: Mapping[str, Any], *, where: str) -> int | None:
    value = data.get("priority")
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"{where}: 'priority' must be a non-negative integer.")
    return value


def _parse_provider(index: int, data: Any) -> ApiProvider:
    where = f"providers[{index}]"
    if not isinstance(data, Mapping):
        raise ConfigError(f"{where} must be a mapping.")
    method = data.get("method", "GET")
    if not isinstance(method, str) or not method:
        raise ConfigError(f"{where}: 'method' must be a non-empty string.")
    return ApiProvider(
        name=_validate_str(data, "name", where=where),
        method=method.upper(),
        url=_validate_str(data, "url", where=where),
        pathname=_validate_str(data, "pathname", where=where),
        response_type=_validate_str(data, "response_type", where=where),
        search=_optional_str_mapping(data, "search", where=where),
        headers=_optional_str_mapping(data, "headers", where=where),
        body=data.get("body"),
        priority=_optional_priority(data, where=where),
    )


def _parse_race_options(data: Any) -> RaceConfig:
    if data is None:
        return RaceConfig()
    if not isinstance(data, Mapping):
        raise ConfigError("'race' must be a mapping.")
    unknown = sorted(set(data) - set(_RACE_OPTIONS))
    if unknown:
        raise ConfigError(f"Unknown race options: {', '.join(map(str, unknown))}")
    return RaceConfig(**{key: data[key] for key in _RACE_OPTIONS if key in data})


def parse_race_config(raw_data: Any) -> RaceSettings:
    """Validate an already-decoded configuration document."""

    if not isinstance(raw_data, Mapping):
        raise ConfigError("Config root must be a mapping.")
    raw_providers = raw_data.get("providers")
    if not isinstance(raw_providers, list) or not raw_providers:
        raise ConfigError("'providers' must be a non-empty list.")

    providers = tuple(_parse_provider(index, item) for index, item in enumerate(raw_providers))
    names = [provider.name for provider in providers]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ConfigError(f"Duplicate provider names: {', '.join(duplicates)}")

    return RaceSettings(providers=providers, race=_parse_race_options(raw_data.get("race")))


def load_race_config(config: str | Path) -> RaceSettings:
    """Load and validate a race configuration file."""

    path = _coerce_path(config)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc

    try:
        raw_data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    return parse_race_config(raw_data)
