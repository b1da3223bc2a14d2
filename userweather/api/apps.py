from __future__ import annotations

from django.apps import AppConfig


class ApiConfig(AppConfig):
    name = "userweather.api"
    label = "api"
    verbose_name = "User weather API"

    def ready(self) -> None:
        from . import checks  # noqa: F401 - registers the system checks
