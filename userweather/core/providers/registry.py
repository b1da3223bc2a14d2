"""Select the configured weather provider."""
from __future__ import annotations

import enum
import logging
from functools import lru_cache
from typing import Any, Optional

from django.core.exceptions import ImproperlyConfigured

from ..config import WeatherConfig
from .base import WeatherProvider
from .openweather import OpenWeatherProvider
from .weatherapi import WeatherApiProvider

logger = logging.getLogger(__name__)


class ProviderDriver(str, enum.Enum):
    OPENWEATHER = "openweather"
    WEATHERAPI = "weatherapi"
    # Documented in the configuration but without an implementation.
    NWS = "nws"

    @classmethod
    def parse(cls, value: Any) -> Optional["ProviderDriver"]:
        try:
            return cls(value)
        except ValueError:
            return None


def build_provider(config: Optional[WeatherConfig] = None, **kwargs: Any) -> WeatherProvider:
    """Build the provider named by ``weather.driver``.

    Extra keyword arguments (cache, scheduler, notifier, session) are passed
    to the provider. Unknown drivers fall back to OpenWeather without a key.
    """
    config = config or WeatherConfig()
    kwargs.setdefault("config", config)
    raw_driver = config.get("weather.driver")
    driver = ProviderDriver.parse(raw_driver)

    if driver is ProviderDriver.OPENWEATHER:
        return OpenWeatherProvider(api_key=config.get("weather.providers.openweather.key"), **kwargs)
    if driver is ProviderDriver.WEATHERAPI:
        return WeatherApiProvider(api_key=config.get("weather.providers.weatherapi.key"), **kwargs)
    if driver is ProviderDriver.NWS:
        raise ImproperlyConfigured("Weather driver 'nws' is not supported yet")

    logger.warning("Unknown weather driver %r, falling back to %s", raw_driver, ProviderDriver.OPENWEATHER.value)
    return OpenWeatherProvider(api_key=None, **kwargs)


@lru_cache(maxsize=1)
def get_weather_provider() -> WeatherProvider:
    return build_provider()


__all__ = ["ProviderDriver", "build_provider", "get_weather_provider"]
