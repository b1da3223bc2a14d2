"""Weather update events and the sinks that broadcast them."""
from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Optional, Protocol
from uuid import uuid4

import paho.mqtt.client as mqtt
from django.core.exceptions import ImproperlyConfigured
from django.dispatch import Signal

from .config import WeatherConfig
from .entities import WeatherData

logger = logging.getLogger(__name__)

# Receivers get ``channel``, ``event`` and ``payload`` keyword arguments.
weather_updated = Signal()


@dataclass(frozen=True)
class WeatherUpdated:
    """A location finished refreshing, either with weather or with an error."""

    lat: float
    lon: float
    weather: Optional[WeatherData] = None
    error: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        if (self.weather is None) == (self.error is None):
            raise ValueError("WeatherUpdated needs exactly one of weather or error")

    def broadcast_on(self) -> str:
        return "weather"

    def broadcast_as(self) -> str:
        return "WeatherUpdated"

    def broadcast_with(self) -> Dict[str, Any]:
        return {
            "lat": self.lat,
            "lon": self.lon,
            "weather": self.weather.as_payload() if self.weather is not None else None,
            "error": self.error,
        }

    def dispatch(self, sink: "NotificationSink") -> None:
        sink.publish(self.broadcast_on(), self.broadcast_as(), self.broadcast_with())


class NotificationSink(Protocol):
    def publish(self, channel: str, event_name: str, payload: Dict[str, Any]) -> None:
        ...


class SignalNotificationSink:
    """Hand events to in-process receivers of :data:`weather_updated`."""

    def publish(self, channel: str, event_name: str, payload: Dict[str, Any]) -> None:
        weather_updated.send(sender=self.__class__, channel=channel, event=event_name, payload=payload)


@dataclass
class MqttConfig:
    host: str = "localhost"
    port: int = 1883
    username: Optional[str] = None
    password: Optional[str] = None
    keepalive: int = 60
    topic_prefix: str = "userweather"
    qos: int = 1
    client_id: str = ""

    @classmethod
    def from_config(cls, config: WeatherConfig) -> "MqttConfig":
        values = config.get("weather.broadcast.mqtt", {}) or {}
        return cls(
            host=values.get("host", cls.host),
            port=int(values.get("port", cls.port)),
            username=values.get("username"),
            password=values.get("password"),
            keepalive=int(values.get("keepalive", cls.keepalive)),
            topic_prefix=values.get("topic_prefix", cls.topic_prefix),
            qos=int(values.get("qos", cls.qos)),
            client_id=values.get("client_id") or f"userweather-{uuid4().hex[:8]}",
        )


class MqttNotificationSink:
    """Publish events as JSON to ``<prefix>/<channel>/<event>``."""

    def __init__(self, config: Optional[MqttConfig] = None, client: Optional[mqtt.Client] = None) -> None:
        self.config = config or MqttConfig()
        self._client = client
        self._connected = False
        self._lock = threading.Lock()

    def publish(self, channel: str, event_name: str, payload: Dict[str, Any]) -> None:
        client = self._ensure_connected()
        topic = f"{self.config.topic_prefix}/{channel}/{event_name}"
        info = client.publish(topic, json.dumps(payload), qos=self.config.qos)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise RuntimeError(f"MQTT publish to {topic} failed: rc={info.rc}")
        logger.debug("Published %s to %s", event_name, topic)

    def close(self) -> None:
        with self._lock:
            if self._client is not None and self._connected:
                self._client.loop_stop()
                self._client.disconnect()
            self._connected = False

    def _ensure_connected(self) -> mqtt.Client:
        with self._lock:
            if self._client is None:
                self._client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=self.config.client_id)
                if self.config.username:
                    self._client.username_pw_set(self.config.username, self.config.password)
            if not self._connected:
                logger.info("Connecting to MQTT broker %s:%s", self.config.host, self.config.port)
                self._client.connect(self.config.host, self.config.port, self.config.keepalive)
                self._client.loop_start()
                self._connected = True
            return self._client


def build_notification_sink(config: Optional[WeatherConfig] = None) -> NotificationSink:
    config = config or WeatherConfig()
    driver = config.get("weather.broadcast.driver", "signal")
    if driver == "signal":
        return SignalNotificationSink()
    if driver == "mqtt":
        return MqttNotificationSink(MqttConfig.from_config(config))
    raise ImproperlyConfigured(f"Unsupported weather broadcast driver: {driver!r}")


@lru_cache(maxsize=1)
def get_notification_sink() -> NotificationSink:
    return build_notification_sink()


__all__ = [
    "MqttConfig",
    "MqttNotificationSink",
    "NotificationSink",
    "SignalNotificationSink",
    "WeatherUpdated",
    "build_notification_sink",
    "get_notification_sink",
    "weather_updated",
]
