"""REST API views exposing per-user weather."""
from __future__ import annotations

from typing import Any, Dict

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from userweather.api.models import User
from userweather.core.entities import WeatherData
from userweather.core.providers.registry import get_weather_provider


def serialize_user_weather(user: User, weather: WeatherData) -> Dict[str, Any]:
    """Pair a user with either its weather or the error explaining its absence."""
    return {
        "user": user.as_dict(),
        "weather": None if weather.has_error else weather.as_payload(),
        "error": weather.get_error() if weather.has_error else None,
    }


class StatusView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):
        return Response({"message": "all systems are a go"}, status=status.HTTP_200_OK)


class UsersWeatherView(APIView):
    """List users with their current weather."""

    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):  # noqa: D401
        provider = get_weather_provider()
        users = User.objects.only("id", "name", "email", "latitude", "longitude").order_by("id")
        data = [serialize_user_weather(user, provider.current(user.latitude, user.longitude)) for user in users]
        return Response({"data": data}, status=status.HTTP_200_OK)


class UserWeatherView(APIView):
    """Current weather for a single user."""

    permission_classes = [AllowAny]

    def get(self, request, user_id: int, *args, **kwargs):  # noqa: D401
        user = get_object_or_404(User, pk=user_id)
        weather = get_weather_provider().current(user.latitude, user.longitude)
        return Response({"data": serialize_user_weather(user, weather)}, status=status.HTTP_200_OK)
