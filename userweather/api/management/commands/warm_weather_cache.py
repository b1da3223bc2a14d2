"""Management command that schedules a weather refresh for every user."""
from __future__ import annotations

from typing import Any

from django.core.management.base import BaseCommand, CommandError

from userweather.api.locations import UserLocations
from userweather.core.config import WeatherConfig
from userweather.core.dispatcher import WarmCacheDispatcher
from userweather.core.scheduler import DEFAULT_QUEUE, SyncScheduler, get_scheduler


class Command(BaseCommand):
    help = "Dispatch background jobs to warm the weather cache for all users"

    def add_arguments(self, parser) -> None:  # noqa: D401
        parser.add_argument("--chunk", type=int, default=100, help="Number of users per chunk")
        parser.add_argument(
            "--unique",
            action="store_true",
            help="Schedule identical coordinates only once",
        )
        parser.add_argument(
            "--sync",
            action="store_true",
            help="Refresh inline instead of on the background scheduler",
        )

    def handle(self, *args: Any, **options: Any) -> None:  # noqa: D401
        chunk = options["chunk"]
        if chunk < 1:
            raise CommandError("--chunk must be a positive integer")

        scheduler = SyncScheduler() if options["sync"] else get_scheduler()
        dispatcher = WarmCacheDispatcher(
            scheduler,
            UserLocations(),
            chunk_size=chunk,
            queue=WeatherConfig().get("weather.queue", DEFAULT_QUEUE) or DEFAULT_QUEUE,
            unique=options["unique"],
        )
        scheduled = dispatcher.dispatch()
        self.stdout.write(self.style.SUCCESS("Weather cache warm-up jobs dispatched."))
        self.stdout.write(f"{scheduled} refresh job(s) scheduled.")
