"""WeatherAPI.com current weather provider."""
from __future__ import annotations

from typing import Any, Dict, Optional

from ..transformers import WeatherApiTransformer, WeatherDataTransformer
from .base import WeatherProvider


class WeatherApiProvider(WeatherProvider):
    """Integration with the WeatherAPI ``/v1/current.json`` endpoint."""

    name = "weatherapi"
    label = "WeatherAPI"
    endpoint = "https://api.weatherapi.com/v1/current.json"

    def __init__(
        self,
        *,
        api_key: Optional[str],
        transformer: Optional[WeatherDataTransformer] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(api_key=api_key, transformer=transformer or WeatherApiTransformer(), **kwargs)

    def build_params(self, latitude: float, longitude: float) -> Dict[str, Any]:
        # WeatherAPI takes the location as a single "lat,lon" query.
        return {
            "key": self.api_key,
            "q": f"{latitude:f},{longitude:f}",
            "aqi": "no",
        }


__all__ = ["WeatherApiProvider"]
