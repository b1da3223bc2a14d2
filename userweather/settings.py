"""Base Django settings for the user weather service."""
from __future__ import annotations

from pathlib import Path
import os

from django.core.exceptions import ImproperlyConfigured

BASE_DIR = Path(__file__).resolve().parent.parent


def env(name: str, default: str | None = None) -> str:
    """Fetch environment variables while allowing explicit defaults."""

    value = os.environ.get(name, default)
    if value is None:
        raise ImproperlyConfigured(f"Environment variable {name} is required")
    return value


SECRET_KEY = env("DJANGO_SECRET_KEY")
DEBUG = os.environ.get("DJANGO_DEBUG", "0") == "1"
ALLOWED_HOSTS = os.environ.get("DJANGO_ALLOWED_HOSTS", "*").split(",")

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "rest_framework",
    "userweather.api",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "userweather.urls"

WSGI_APPLICATION = "userweather.wsgi.application"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

DB_ENGINE = os.environ.get("DB_ENGINE", "django.db.backends.sqlite3")
if DB_ENGINE == "django.db.backends.sqlite3":
    DATABASES = {
        "default": {
            "ENGINE": DB_ENGINE,
            "NAME": os.environ.get("DB_NAME", str(BASE_DIR / "db.sqlite3")),
        }
    }
else:
    if DB_ENGINE == "django.db.backends.mysql":
        import pymysql

        pymysql.install_as_MySQLdb()
    DATABASES = {
        "default": {
            "ENGINE": DB_ENGINE,
            "NAME": env("DB_NAME"),
            "USER": env("DB_USER"),
            "PASSWORD": env("DB_PASSWORD", ""),
            "HOST": os.environ.get("DB_HOST", "mysql"),
            "PORT": os.environ.get("DB_PORT", "3306"),
        }
    }

REDIS_URL = os.environ.get("REDIS_URL")
if REDIS_URL:
    CACHES = {
        "default": {
            "BACKEND": "django_redis.cache.RedisCache",
            "LOCATION": REDIS_URL,
            "OPTIONS": {
                "CLIENT_CLASS": "django_redis.client.DefaultClient",
            },
        }
    }
else:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": "weather-local",
        }
    }

WEATHER_CACHE_ALIAS = os.environ.get("WEATHER_CACHE_ALIAS", "default")

# Read through userweather.core.config.WeatherConfig as "weather.<path>".
WEATHER = {
    # openweather, weatherapi, nws (nws has no implementation yet)
    "driver": os.environ.get("WEATHER_DRIVER", "weatherapi"),
    "ttl": int(os.environ.get("WEATHER_TTL_SECONDS", "3600")),
    "queue": os.environ.get("WEATHER_QUEUE", "default"),
    "providers": {
        "openweather": {
            "key": os.environ.get("OPENWEATHER_API_KEY"),
        },
        "weatherapi": {
            "key": os.environ.get("WEATHERAPI_API_KEY"),
        },
    },
    "scheduler": {
        "driver": os.environ.get("WEATHER_SCHEDULER", "thread"),
        "workers": int(os.environ.get("WEATHER_WORKERS", "4")),
    },
    "broadcast": {
        "driver": os.environ.get("WEATHER_BROADCAST_DRIVER", "signal"),
        "mqtt": {
            "host": os.environ.get("MQTT_HOST", "localhost"),
            "port": int(os.environ.get("MQTT_PORT", "1883")),
            "username": os.environ.get("MQTT_USERNAME"),
            "password": os.environ.get("MQTT_PASSWORD"),
            "keepalive": int(os.environ.get("MQTT_KEEPALIVE", "60")),
            "topic_prefix": os.environ.get("MQTT_TOPIC_PREFIX", "userweather"),
        },
    },
}

REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
    ],
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.AllowAny",
    ],
    "UNAUTHENTICATED_USER": None,
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "loggers": {
        "userweather": {
            "handlers": ["console"],
            "level": os.environ.get("WEATHER_LOG_LEVEL", "INFO"),
        },
    },
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True
