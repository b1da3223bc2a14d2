"""Map upstream weather payloads onto :class:`WeatherData`."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Protocol

from .entities import WeatherData, celsius_to_fahrenheit
from .schemas import OpenWeatherPayload, WeatherApiCondition, WeatherApiCurrent, WeatherApiPayload

OPENWEATHER_ICON_URL = "https://openweathermap.org/img/wn/{code}@2x.png"


class WeatherDataTransformer(Protocol):
    """Pure mapping from one upstream payload shape to WeatherData."""

    def transform(self, payload: Mapping[str, Any]) -> WeatherData:
        ...


def _ms_to_kph(value: float) -> float:
    return value * 3.6


def _observed_at(epoch: Optional[int]) -> datetime:
    if epoch is None:
        return datetime.now(tz=timezone.utc)
    return datetime.fromtimestamp(int(epoch), tz=timezone.utc)


def _absolute_icon_url(icon: Optional[str]) -> Optional[str]:
    if not icon:
        return None
    if icon.startswith("//"):
        return f"https:{icon}"
    if icon.startswith(("http://", "https://")):
        return icon
    return f"https://{icon.lstrip('/')}"


class OpenWeatherTransformer:
    """OpenWeather reports metric units with wind in metres per second."""

    def transform(self, payload: Mapping[str, Any]) -> WeatherData:
        data = OpenWeatherPayload.model_validate(payload)
        main = data.main
        temp_c = float(main.temp) if main and main.temp is not None else 0.0
        feels_c = float(main.feels_like) if main and main.feels_like is not None else temp_c
        humidity = int(main.humidity) if main and main.humidity is not None else 0
        wind_ms = data.wind.speed if data.wind and data.wind.speed is not None else 0.0

        primary = data.weather[0] if data.weather else None
        condition = primary.description if primary and primary.description else "unknown"
        icon_url = None
        if primary and primary.icon:
            icon_url = OPENWEATHER_ICON_URL.format(code=primary.icon)

        return WeatherData(
            temp_c=temp_c,
            temp_f=celsius_to_fahrenheit(temp_c),
            condition=condition,
            icon_url=icon_url,
            wind_kph=_ms_to_kph(float(wind_ms)),
            humidity=humidity,
            feels_like_c=feels_c,
            feels_like_f=celsius_to_fahrenheit(feels_c),
            source=data.source,
            observed_at=_observed_at(data.dt),
        )


class WeatherApiTransformer:
    """WeatherAPI already reports km/h and a scheme-relative icon path."""

    def transform(self, payload: Mapping[str, Any]) -> WeatherData:
        data = WeatherApiPayload.model_validate(payload)
        current = data.current or WeatherApiCurrent()
        condition = current.condition or WeatherApiCondition()
        temp_c = float(current.temp_c) if current.temp_c is not None else 0.0
        feels_c = float(current.feelslike_c) if current.feelslike_c is not None else temp_c

        return WeatherData(
            temp_c=temp_c,
            temp_f=celsius_to_fahrenheit(temp_c),
            condition=condition.text or "unknown",
            icon_url=_absolute_icon_url(condition.icon),
            wind_kph=float(current.wind_kph) if current.wind_kph is not None else 0.0,
            humidity=int(current.humidity) if current.humidity is not None else 0,
            feels_like_c=feels_c,
            feels_like_f=celsius_to_fahrenheit(feels_c),
            source=data.source,
            observed_at=_observed_at(current.last_updated_epoch),
        )


__all__ = ["WeatherDataTransformer", "OpenWeatherTransformer", "WeatherApiTransformer"]
