from __future__ import annotations

import threading

import pytest
import requests

from userweather.core.entities import WeatherData
from userweather.core.providers import errors
from userweather.core.providers.openweather import OpenWeatherProvider
from userweather.core.tasks import RefreshWeatherCache


class OfflineSession:
    """Fails the test if anything tries to reach the network."""

    def request(self, *args, **kwargs):
        raise AssertionError(f"unexpected HTTP request: {args} {kwargs}")


OPENWEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"
WEATHERAPI_URL = "https://api.weatherapi.com/v1/current.json"

OPENWEATHER_BODY = {
    "main": {"temp": 20, "feels_like": 21, "humidity": 60},
    "wind": {"speed": 10},
    "weather": [{"description": "clear sky", "icon": "01d"}],
    "dt": 1690000000,
}


def test_current_returns_cached_value_without_network(provider_kwargs, recording_scheduler) -> None:
    provider = OpenWeatherProvider(api_key="test-api-key", session=OfflineSession(), **provider_kwargs)
    cached = WeatherData.empty("openweather", "Invalid API key", 401)
    provider.cache.put(provider.cache_key(40.7128, -74.006), cached, 60)

    assert provider.current(40.7128, -74.006) == cached
    assert recording_scheduler.scheduled == []


def test_current_miss_schedules_refresh_and_returns_placeholder(
    openweather, recording_scheduler, cache_backend
) -> None:
    weather = openweather.current(40.7128, -74.006)

    assert weather.has_error
    assert weather.get_error() == {"code": 102, "message": errors.FETCHING_MESSAGE}
    assert weather.source == "openweather"
    assert recording_scheduler.scheduled == [(RefreshWeatherCache(40.7128, -74.006), "default")]
    # The placeholder itself is never cached.
    assert cache_backend.sets == []


def test_current_uses_configured_queue(provider_kwargs, recording_scheduler) -> None:
    from userweather.core.config import DictConfig

    provider_kwargs["config"] = DictConfig({"weather": {"queue": "weather"}})
    provider = OpenWeatherProvider(api_key="k", **provider_kwargs)

    provider.current(1.0, 2.0)

    assert recording_scheduler.scheduled[0][1] == "weather"


def test_refresh_now_caches_and_broadcasts(openweather, requests_mock, cache_backend, recording_sink) -> None:
    requests_mock.get(OPENWEATHER_URL, json=OPENWEATHER_BODY)

    weather = openweather.refresh_now(40.7128, -74.006)

    assert weather is not None
    assert weather.temp_c == 20
    assert weather.source == "openweather"
    assert cache_backend.sets == [("openweather:40.712800:-74.006000", weather, 3600)]

    assert len(recording_sink.published) == 1
    channel, event, payload = recording_sink.published[0]
    assert (channel, event) == ("weather", "WeatherUpdated")
    assert payload["lat"] == 40.7128
    assert payload["lon"] == -74.006
    assert payload["weather"]["tempC"] == 20
    assert payload["error"] is None

    query = requests_mock.last_request.qs
    assert query["lat"] == ["40.7128"]
    assert query["lon"] == ["-74.006"]
    assert query["appid"] == ["test-api-key"]
    assert query["units"] == ["metric"]


def test_refresh_now_then_current_hits_cache(openweather, requests_mock, recording_scheduler) -> None:
    requests_mock.get(OPENWEATHER_URL, json=OPENWEATHER_BODY)

    fresh = openweather.refresh_now(10.0, 20.0)

    assert openweather.current(10.0, 20.0) == fresh
    assert recording_scheduler.scheduled == []


def test_refresh_now_uses_configured_ttl(provider_kwargs, requests_mock, cache_backend) -> None:
    from userweather.core.config import DictConfig

    provider_kwargs["config"] = DictConfig({"weather": {"ttl": 900}})
    provider = OpenWeatherProvider(api_key="k", **provider_kwargs)
    requests_mock.get(OPENWEATHER_URL, json=OPENWEATHER_BODY)

    provider.refresh_now(1.0, 2.0)

    assert cache_backend.sets[0][2] == 900


def test_refresh_now_caches_http_error(openweather, requests_mock, cache_backend, recording_sink) -> None:
    requests_mock.get(OPENWEATHER_URL, status_code=401, json={"cod": 401, "message": "Invalid API key"})

    assert openweather.refresh_now(40.7128, -74.006) is None

    key, placeholder, ttl = cache_backend.sets[0]
    assert key == "openweather:40.712800:-74.006000"
    assert ttl == 60
    assert placeholder.get_error() == {"code": 401, "message": "Invalid API key"}

    _, _, payload = recording_sink.published[0]
    assert payload["weather"] is None
    assert payload["error"] == {"code": 401, "message": "Invalid API key"}


def test_refresh_now_reads_nested_error_message(weatherapi, requests_mock, cache_backend) -> None:
    requests_mock.get(
        WEATHERAPI_URL,
        status_code=400,
        json={"error": {"code": 1006, "message": "Invalid coordinates"}},
    )

    assert weatherapi.refresh_now(999.0, 999.0) is None

    placeholder = cache_backend.sets[0][1]
    assert placeholder.get_error() == {"code": 400, "message": "Invalid coordinates"}
    assert placeholder.source == "weatherapi"


def test_refresh_now_falls_back_to_label_for_unreadable_error(openweather, requests_mock, cache_backend) -> None:
    requests_mock.get(OPENWEATHER_URL, status_code=503, text="<html>Service Unavailable</html>")

    openweather.refresh_now(1.0, 2.0)

    assert cache_backend.sets[0][1].get_error() == {"code": 503, "message": "OpenWeather error"}


def test_refresh_now_transport_error(openweather, requests_mock, cache_backend, recording_sink) -> None:
    requests_mock.get(OPENWEATHER_URL, exc=requests.exceptions.ConnectTimeout)

    assert openweather.refresh_now(1.0, 2.0) is None

    placeholder = cache_backend.sets[0][1]
    assert placeholder.get_error() == {"code": 0, "message": errors.TRANSPORT_ERROR_MESSAGE}
    assert recording_sink.published[0][2]["error"]["code"] == 0


def test_refresh_now_invalid_json_is_unexpected_error(openweather, requests_mock, cache_backend) -> None:
    requests_mock.get(OPENWEATHER_URL, text="not json")

    assert openweather.refresh_now(1.0, 2.0) is None

    placeholder = cache_backend.sets[0][1]
    assert placeholder.get_error() == {"code": 0, "message": "Unexpected error"}
    assert cache_backend.sets[0][2] == 60


def test_refresh_now_survives_broken_sink(provider_kwargs, requests_mock) -> None:
    class BrokenSink:
        def publish(self, channel, event_name, payload):
            raise RuntimeError("broker down")

    provider_kwargs["notifier"] = BrokenSink()
    provider = OpenWeatherProvider(api_key="k", **provider_kwargs)
    requests_mock.get(OPENWEATHER_URL, json=OPENWEATHER_BODY)

    weather = provider.refresh_now(1.0, 2.0)

    assert weather is not None
    assert provider.cache.get(provider.cache_key(1.0, 2.0)) == weather


def test_weatherapi_request_parameters(weatherapi, requests_mock) -> None:
    requests_mock.get(
        WEATHERAPI_URL,
        json={"current": {"temp_c": 18.0, "wind_kph": 5.0, "condition": {"text": "Sunny", "icon": "//cdn/x.png"}}},
    )

    weather = weatherapi.refresh_now(40.7128, -74.006)

    assert weather is not None
    assert weather.source == "weatherapi"
    assert weather.icon_url == "https://cdn/x.png"
    query = requests_mock.last_request.qs
    assert query["key"] == ["test-api-key"]
    assert query["q"] == ["40.712800,-74.006000"]
    assert query["aqi"] == ["no"]


def test_parse_error_message_without_response() -> None:
    assert errors.parse_error_message(None, "fallback") == "fallback"


@pytest.mark.parametrize("body", ["[1, 2]", "", '{"detail": "nope"}'])
def test_parse_error_message_fallbacks(body, requests_mock) -> None:
    requests_mock.get("https://example.test/", text=body, status_code=500)

    response = requests.get("https://example.test/")

    assert errors.parse_error_message(response, "Upstream error") == "Upstream error"


def test_configured_provider_refreshes_off_the_calling_thread(requests_mock) -> None:
    from userweather.core.providers.registry import get_weather_provider
    from userweather.core.scheduler import ThreadPoolScheduler

    callers = []

    def respond(request, context):
        callers.append(threading.get_ident())
        return OPENWEATHER_BODY

    requests_mock.get(OPENWEATHER_URL, json=respond)
    provider = get_weather_provider()
    assert isinstance(provider.scheduler, ThreadPoolScheduler)

    weather = provider.current(40.7128, -74.006)

    assert weather.get_error()["code"] == 102
    provider.scheduler.shutdown(wait=True)
    assert len(callers) == 1
    assert threading.get_ident() not in callers
    assert provider.cache.get(provider.cache_key(40.7128, -74.006)).temp_c == 20
