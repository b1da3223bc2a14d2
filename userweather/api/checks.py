"""System checks for the weather configuration."""
from __future__ import annotations

from django.core import checks

from userweather.core.config import WeatherConfig
from userweather.core.providers.registry import ProviderDriver


@checks.register("weather")
def check_weather_driver(app_configs=None, **kwargs):
    driver = WeatherConfig().get("weather.driver")
    parsed = ProviderDriver.parse(driver)
    if parsed is ProviderDriver.NWS:
        return [
            checks.Error(
                "Weather driver 'nws' is not supported.",
                hint="Set WEATHER_DRIVER to 'openweather' or 'weatherapi'.",
                id="weather.E001",
            )
        ]
    if parsed is None:
        return [
            checks.Warning(
                f"Unknown weather driver {driver!r}; OpenWeather without an API key will be used.",
                hint="Set WEATHER_DRIVER to 'openweather' or 'weatherapi'.",
                id="weather.W001",
            )
        ]
    return []
