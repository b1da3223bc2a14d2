"""Read-only access to weather configuration through dotted paths."""
from __future__ import annotations

from typing import Any, Mapping

from django.conf import settings

_MISSING = object()


class WeatherConfig:
    """Resolve paths such as ``weather.providers.openweather.key``.

    The first segment names a Django setting (upper-cased), the remaining
    segments walk nested mappings. Missing segments resolve to ``default``.
    """

    def get(self, path: str, default: Any = None) -> Any:
        head, *rest = path.split(".")
        value = getattr(settings, head.upper(), _MISSING)
        for segment in rest:
            if not isinstance(value, Mapping):
                return default
            value = value.get(segment, _MISSING)
        if value is _MISSING:
            return default
        return value


class DictConfig(WeatherConfig):
    """Configuration backed by a plain mapping, e.g. ``{"weather": {...}}``."""

    def __init__(self, values: Mapping[str, Any]) -> None:
        self._values = values

    def get(self, path: str, default: Any = None) -> Any:
        value: Any = self._values
        for segment in path.split("."):
            if not isinstance(value, Mapping) or segment not in value:
                return default
            value = value[segment]
        return value


__all__ = ["WeatherConfig", "DictConfig"]
