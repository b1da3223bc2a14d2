"""Error handling shared by the HTTP weather providers."""
from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional

from requests import Response

from ..entities import WeatherData

logger = logging.getLogger(__name__)

FETCHING_CODE = 102
FETCHING_MESSAGE = "Fetching weather (async)…"
TRANSPORT_ERROR_CODE = 0
TRANSPORT_ERROR_MESSAGE = "Transport error contacting weather service"
UNEXPECTED_ERROR_CODE = 0
UNEXPECTED_ERROR_MESSAGE = "Unexpected error"
ERROR_TTL_SECONDS = 60


class WeatherParseError(ValueError):
    """Raised when a successful upstream response carries an unusable body."""


def parse_error_message(response: Optional[Response], fallback: str) -> str:
    """Extract a readable message from a failed upstream response.

    WeatherAPI nests it as ``{"error": {"message": ...}}``, OpenWeather and
    most others use a top-level ``message``. Anything else yields ``fallback``.
    """
    if response is None:
        return fallback
    raw = response.text
    if not raw:
        return fallback
    try:
        decoded = json.loads(raw)
    except ValueError:
        return fallback
    if not isinstance(decoded, Mapping):
        return fallback

    nested = decoded.get("error")
    if isinstance(nested, Mapping) and nested.get("message") is not None:
        return str(nested["message"])
    if decoded.get("message") is not None:
        return str(decoded["message"])
    return fallback


def build_error_placeholder(source: str, message: Optional[str], code: Optional[int]) -> WeatherData:
    return WeatherData.empty(source, message, code)


def decode_payload(response: Response) -> dict[str, Any]:
    try:
        payload = json.loads(response.text)
    except ValueError as exc:
        raise WeatherParseError("invalid json") from exc
    if not isinstance(payload, dict):
        raise WeatherParseError(f"expected a JSON object, got {type(payload).__name__}")
    return payload


def log_http_error(provider: str, latitude: float, longitude: float, status: int, message: str) -> None:
    context = {
        "provider": provider,
        "lat": latitude,
        "lon": longitude,
        "status": status,
        "error_message": message,
    }
    if status in (400, 401, 403):
        logger.warning("Weather provider %s client error %s: %s", provider, status, message, extra=context)
    elif status >= 500:
        logger.error("Weather provider %s server error %s: %s", provider, status, message, extra=context)
    else:
        logger.error("Weather provider %s request error %s: %s", provider, status, message, extra=context)


__all__ = [
    "ERROR_TTL_SECONDS",
    "FETCHING_CODE",
    "FETCHING_MESSAGE",
    "TRANSPORT_ERROR_CODE",
    "TRANSPORT_ERROR_MESSAGE",
    "UNEXPECTED_ERROR_CODE",
    "UNEXPECTED_ERROR_MESSAGE",
    "WeatherParseError",
    "build_error_placeholder",
    "decode_payload",
    "log_http_error",
]
