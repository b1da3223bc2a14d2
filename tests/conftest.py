from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import pytest
from django.core.cache import cache
from requests_mock import Mocker

from userweather.core.cache import WeatherCache
from userweather.core.config import DictConfig
from userweather.core.events import get_notification_sink
from userweather.core.scheduler import ThreadPoolScheduler, get_scheduler
from userweather.core.providers.registry import get_weather_provider
from userweather.core.providers.openweather import OpenWeatherProvider
from userweather.core.providers.weatherapi import WeatherApiProvider
from userweather.core.tasks import RefreshWeatherCache


class RecordingScheduler:
    def __init__(self) -> None:
        self.scheduled: List[Tuple[RefreshWeatherCache, str]] = []

    def schedule(self, task: RefreshWeatherCache, queue: str = "default") -> None:
        self.scheduled.append((task, queue))


class RecordingSink:
    def __init__(self) -> None:
        self.published: List[Tuple[str, str, Dict[str, Any]]] = []

    def publish(self, channel: str, event_name: str, payload: Dict[str, Any]) -> None:
        self.published.append((channel, event_name, payload))


class RecordingBackend:
    """Stands in for a Django cache backend and remembers every write."""

    def __init__(self) -> None:
        self.values: Dict[str, Any] = {}
        self.sets: List[Tuple[str, Any, Optional[int]]] = []

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def set(self, key: str, value: Any, timeout: Optional[int] = None) -> None:
        self.sets.append((key, value, timeout))
        self.values[key] = value

    def clear(self) -> None:
        self.values.clear()


@pytest.fixture(autouse=True)
def _reset_singletons():
    # Tests may monkeypatch the module attributes, so clear through the
    # references bound at import time.
    singletons = (get_weather_provider, get_scheduler, get_notification_sink)
    for factory in singletons:
        factory.cache_clear()
    cache.clear()
    yield
    built = get_scheduler()
    if isinstance(built, ThreadPoolScheduler):
        built.shutdown(wait=True)
    for factory in singletons:
        factory.cache_clear()
    cache.clear()


@pytest.fixture
def requests_mock():
    with Mocker() as mock:
        yield mock


@pytest.fixture
def recording_scheduler() -> RecordingScheduler:
    return RecordingScheduler()


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def cache_backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def weather_config() -> DictConfig:
    return DictConfig({"weather": {"ttl": 3600, "queue": "default"}})


@pytest.fixture
def provider_kwargs(cache_backend, weather_config, recording_scheduler, recording_sink) -> Dict[str, Any]:
    return {
        "cache": WeatherCache(cache_backend),
        "config": weather_config,
        "scheduler": recording_scheduler,
        "notifier": recording_sink,
    }


@pytest.fixture
def openweather(provider_kwargs) -> OpenWeatherProvider:
    return OpenWeatherProvider(api_key="test-api-key", **provider_kwargs)


@pytest.fixture
def weatherapi(provider_kwargs) -> WeatherApiProvider:
    return WeatherApiProvider(api_key="test-api-key", **provider_kwargs)
