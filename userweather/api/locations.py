"""Enumerate user coordinates for the cache warm-up."""
from __future__ import annotations

from typing import Iterator, List

from userweather.core.dispatcher import Coordinates

from .models import User


class UserLocations:
    """Keyset-paginated ``(lat, lon)`` pairs of all users, ordered by id.

    Each call to :meth:`pages` starts a fresh pass over the table.
    """

    def pages(self, size: int) -> Iterator[List[Coordinates]]:
        last_id = 0
        while True:
            rows = list(
                User.objects.filter(id__gt=last_id)
                .order_by("id")
                .values_list("id", "latitude", "longitude")[:size]
            )
            if not rows:
                return
            last_id = rows[-1][0]
            yield [(lat, lon) for _, lat, lon in rows]
            if len(rows) < size:
                return
