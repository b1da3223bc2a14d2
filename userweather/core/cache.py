from __future__ import annotations

import logging
from typing import Optional

from django.conf import settings
from django.core.cache import caches
from django.core.cache.backends.base import BaseCache

from .entities import WeatherData

logger = logging.getLogger(__name__)


def cache_key(provider_id: str, latitude: float, longitude: float) -> str:
    """Build the cache key for a provider and a coordinate pair.

    Coordinates are rounded to six decimals, so pairs that only differ past
    the sixth decimal share a key. ``+ 0.0`` folds ``-0.0`` into ``0.0``.
    """
    lat = round(float(latitude), 6) + 0.0
    lon = round(float(longitude), 6) + 0.0
    return f"{provider_id}:{lat:.6f}:{lon:.6f}"


class WeatherCache:
    """Weather store on top of a Django cache backend with per-entry TTL."""

    def __init__(self, backend: Optional[BaseCache] = None) -> None:
        self._backend = backend if backend is not None else caches[settings.WEATHER_CACHE_ALIAS]

    def get(self, key: str) -> Optional[WeatherData]:
        value = self._backend.get(key)
        if isinstance(value, WeatherData):
            return value
        if value is not None:
            logger.warning("Ignoring cache entry %s of unexpected type %s", key, type(value).__name__)
        return None

    def put(self, key: str, value: WeatherData, ttl: int) -> None:
        self._backend.set(key, value, timeout=ttl)

    def clear(self) -> None:
        self._backend.clear()


__all__ = ["WeatherCache", "cache_key"]
