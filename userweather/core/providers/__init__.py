from .base import WeatherProvider
from .openweather import OpenWeatherProvider
from .weatherapi import WeatherApiProvider

__all__ = ["WeatherProvider", "OpenWeatherProvider", "WeatherApiProvider"]
