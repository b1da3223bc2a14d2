"""Upstream payload schemas for the supported weather APIs.

Every upstream field is optional so that partial payloads still validate;
the transformers decide the defaults. ``source`` is not sent by the upstream
API, the provider injects it before transformation.
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict

__all__ = [
    "OpenWeatherPayload",
    "WeatherApiCondition",
    "WeatherApiCurrent",
    "WeatherApiPayload",
]


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


# -- OpenWeather /data/2.5/weather -------------------------------------------


class OpenWeatherMain(_Payload):
    temp: Optional[float] = None
    feels_like: Optional[float] = None
    humidity: Optional[float] = None


class OpenWeatherWind(_Payload):
    speed: Optional[float] = None


class OpenWeatherCondition(_Payload):
    main: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None


class OpenWeatherPayload(_Payload):
    source: str
    main: Optional[OpenWeatherMain] = None
    wind: Optional[OpenWeatherWind] = None
    weather: Optional[List[OpenWeatherCondition]] = None
    dt: Optional[int] = None


# -- WeatherAPI /v1/current.json ---------------------------------------------


class WeatherApiCondition(_Payload):
    text: Optional[str] = None
    icon: Optional[str] = None


class WeatherApiCurrent(_Payload):
    temp_c: Optional[float] = None
    feelslike_c: Optional[float] = None
    wind_kph: Optional[float] = None
    humidity: Optional[float] = None
    condition: Optional[WeatherApiCondition] = None
    last_updated_epoch: Optional[int] = None


class WeatherApiPayload(_Payload):
    source: str
    current: Optional[WeatherApiCurrent] = None
