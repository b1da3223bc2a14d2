"""Management command to refresh weather for one location right away."""
from __future__ import annotations

import json
from typing import Any

from django.core.management.base import BaseCommand, CommandError

from userweather.core.providers.registry import get_weather_provider


class Command(BaseCommand):
    help = "Fetch current weather for the provided coordinates and update the cache"

    def add_arguments(self, parser) -> None:  # noqa: D401
        parser.add_argument("--lat", type=float, required=True, help="Latitude")
        parser.add_argument("--lon", type=float, required=True, help="Longitude")

    def handle(self, *args: Any, **options: Any) -> None:  # noqa: D401
        latitude = options["lat"]
        longitude = options["lon"]
        provider = get_weather_provider()

        weather = provider.refresh_now(latitude, longitude)
        if weather is None:
            cached = provider.cache.get(provider.cache_key(latitude, longitude))
            error = cached.get_error() if cached is not None else None
            raise CommandError(f"Weather refresh failed: {json.dumps(error)}")

        self.stdout.write(json.dumps(weather.as_payload()))
