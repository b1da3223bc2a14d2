from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class WeatherError:
    """Error attached to a placeholder WeatherData."""

    code: Optional[int]
    message: Optional[str]

    def as_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


@dataclass(frozen=True)
class WeatherData:
    """Normalized current weather.

    Units are shared by every provider:
    - temperatures in Celsius and Fahrenheit
    - wind speed in kilometres per hour
    - humidity in percent

    A value either describes real weather or is an error placeholder
    (``has_error``). The numeric fields of a placeholder are zeroed and must
    not be trusted.
    """

    temp_c: float
    temp_f: float
    condition: str
    icon_url: Optional[str]
    wind_kph: float
    humidity: int
    feels_like_c: float
    feels_like_f: float
    source: str
    observed_at: datetime
    error: Optional[WeatherError] = None

    @classmethod
    def empty(
        cls,
        source: str,
        message: Optional[str] = None,
        code: Optional[int] = None,
    ) -> "WeatherData":
        error = None
        if message is not None or code is not None:
            error = WeatherError(code=code, message=message)
        return cls(
            temp_c=0.0,
            temp_f=32.0,
            condition="unknown",
            icon_url=None,
            wind_kph=0.0,
            humidity=0,
            feels_like_c=0.0,
            feels_like_f=32.0,
            source=source,
            observed_at=datetime.now(tz=timezone.utc),
            error=error,
        )

    @property
    def has_error(self) -> bool:
        return self.error is not None

    def get_error(self) -> Optional[Dict[str, Any]]:
        if self.error is None:
            return None
        return self.error.as_dict()

    def as_payload(self) -> Dict[str, Any]:
        observed_at = self.observed_at
        if observed_at.tzinfo is None:
            observed_at = observed_at.replace(tzinfo=timezone.utc)
        return {
            "tempC": self.temp_c,
            "tempF": self.temp_f,
            "condition": self.condition,
            "iconUrl": self.icon_url,
            "windKph": self.wind_kph,
            "humidity": self.humidity,
            "feelsLikeC": self.feels_like_c,
            "feelsLikeF": self.feels_like_f,
            "source": self.source,
            "observedAt": observed_at.isoformat(),
        }


def celsius_to_fahrenheit(value: float) -> float:
    return value * 9 / 5 + 32


__all__ = ["WeatherData", "WeatherError", "celsius_to_fahrenheit"]
