from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional

import requests
from requests import Response

from ..cache import WeatherCache, cache_key
from ..config import WeatherConfig
from ..entities import WeatherData
from ..events import NotificationSink, WeatherUpdated, get_notification_sink
from ..scheduler import DEFAULT_QUEUE, WorkScheduler, get_scheduler
from ..tasks import RefreshWeatherCache
from ..transformers import WeatherDataTransformer
from . import errors

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600


@dataclass
class RequestConfig:
    timeout: float = 1.5


class WeatherProvider:
    """Cache-first access to one upstream weather API.

    ``current`` only reads the cache and, on a miss, schedules a
    :class:`RefreshWeatherCache` task. ``refresh_now`` is the only path that
    talks to the upstream API; it is meant to run on a background worker and
    never raises.

    Subclasses describe their endpoint through ``name``, ``label``,
    ``endpoint`` and :meth:`build_params`.
    """

    name: ClassVar[str]
    label: ClassVar[str]
    endpoint: ClassVar[str]

    def __init__(
        self,
        *,
        api_key: Optional[str],
        transformer: WeatherDataTransformer,
        cache: Optional[WeatherCache] = None,
        config: Optional[WeatherConfig] = None,
        scheduler: Optional[WorkScheduler] = None,
        notifier: Optional[NotificationSink] = None,
        session: Optional[requests.Session] = None,
        request_config: Optional[RequestConfig] = None,
    ) -> None:
        self.api_key = api_key
        self.transformer = transformer
        self.cache = cache or WeatherCache()
        self.config = config or WeatherConfig()
        self.scheduler = scheduler or get_scheduler()
        self.notifier = notifier or get_notification_sink()
        self.session = session or requests.Session()
        self.request_config = request_config or RequestConfig()

    def id(self) -> str:
        return self.name

    def build_params(self, latitude: float, longitude: float) -> Dict[str, Any]:
        raise NotImplementedError

    def cache_key(self, latitude: float, longitude: float) -> str:
        return cache_key(self.id(), latitude, longitude)

    # Read path ----------------------------------------------------------
    def current(self, latitude: float, longitude: float) -> WeatherData:
        cached = self.cache.get(self.cache_key(latitude, longitude))
        if cached is not None:
            return cached

        queue = self.config.get("weather.queue", DEFAULT_QUEUE) or DEFAULT_QUEUE
        self.scheduler.schedule(RefreshWeatherCache(latitude, longitude), queue)
        return errors.build_error_placeholder(self.id(), errors.FETCHING_MESSAGE, errors.FETCHING_CODE)

    # Write path ---------------------------------------------------------
    def refresh_now(self, latitude: float, longitude: float) -> Optional[WeatherData]:
        key = self.cache_key(latitude, longitude)
        ttl = self._ttl()
        context = {"provider": self.id(), "lat": latitude, "lon": longitude}

        try:
            response = self._request(latitude, longitude)
            if response.status_code >= 400:
                message = errors.parse_error_message(response, f"{self.label} error")
                errors.log_http_error(self.id(), latitude, longitude, response.status_code, message)
                return self._fail(key, latitude, longitude, message, response.status_code)

            payload = errors.decode_payload(response)
            payload["source"] = self.id()
            weather = self.transformer.transform(payload)
            self.cache.put(key, weather, ttl)
        except requests.RequestException as exc:
            logger.error("%s transport error: %s", self.label, exc, extra=context)
            return self._fail(
                key, latitude, longitude, errors.TRANSPORT_ERROR_MESSAGE, errors.TRANSPORT_ERROR_CODE
            )
        except Exception as exc:  # noqa: BLE001 - every failure becomes a cached placeholder
            logger.error("%s unexpected error: %s", self.label, exc, extra=context, exc_info=exc)
            return self._fail(
                key, latitude, longitude, errors.UNEXPECTED_ERROR_MESSAGE, errors.UNEXPECTED_ERROR_CODE
            )

        self._notify(WeatherUpdated(latitude, longitude, weather=weather))
        return weather

    # Helpers ------------------------------------------------------------
    def _request(self, latitude: float, longitude: float) -> Response:
        return self.session.request(
            "GET",
            self.endpoint,
            params=self.build_params(latitude, longitude),
            timeout=self.request_config.timeout,
        )

    def _ttl(self) -> int:
        value = self.config.get("weather.ttl")
        if value is None:
            return DEFAULT_TTL_SECONDS
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning("Invalid weather.ttl %r, using %ss", value, DEFAULT_TTL_SECONDS)
            return DEFAULT_TTL_SECONDS

    def _fail(self, key: str, latitude: float, longitude: float, message: str, code: int) -> None:
        placeholder = errors.build_error_placeholder(self.id(), message, code)
        try:
            self.cache.put(key, placeholder, errors.ERROR_TTL_SECONDS)
        except Exception:  # noqa: BLE001 - cache outages must not escape the worker
            logger.exception("Failed to cache weather error for %s", key)
        self._notify(WeatherUpdated(latitude, longitude, error=placeholder.get_error()))
        return None

    def _notify(self, event: WeatherUpdated) -> None:
        try:
            event.dispatch(self.notifier)
        except Exception:  # noqa: BLE001 - broadcasting is best effort
            logger.exception("Failed to broadcast weather update for %s,%s", event.lat, event.lon)


__all__ = ["DEFAULT_TTL_SECONDS", "RequestConfig", "WeatherProvider"]
