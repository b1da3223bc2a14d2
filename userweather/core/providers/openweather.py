"""OpenWeather current weather provider."""
from __future__ import annotations

from typing import Any, Dict, Optional

from ..transformers import OpenWeatherTransformer, WeatherDataTransformer
from .base import WeatherProvider


class OpenWeatherProvider(WeatherProvider):
    """Integration with the OpenWeather ``/data/2.5/weather`` endpoint."""

    name = "openweather"
    label = "OpenWeather"
    endpoint = "https://api.openweathermap.org/data/2.5/weather"

    def __init__(
        self,
        *,
        api_key: Optional[str],
        transformer: Optional[WeatherDataTransformer] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(api_key=api_key, transformer=transformer or OpenWeatherTransformer(), **kwargs)

    def build_params(self, latitude: float, longitude: float) -> Dict[str, Any]:
        return {
            "lat": latitude,
            "lon": longitude,
            "appid": self.api_key,
            "units": "metric",
        }


__all__ = ["OpenWeatherProvider"]
