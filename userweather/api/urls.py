"""API URL configuration."""
from __future__ import annotations

from django.urls import path

from userweather.api.views import StatusView, UserWeatherView, UsersWeatherView

urlpatterns = [
    path("", StatusView.as_view(), name="status"),
    path("users", UsersWeatherView.as_view(), name="users-weather"),
    path("users/<int:user_id>/weather", UserWeatherView.as_view(), name="user-weather"),
]
