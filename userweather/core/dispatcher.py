"""Proactively schedule refreshes for every known location."""
from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional, Protocol, Sequence, Set, Tuple

from .scheduler import DEFAULT_QUEUE, WorkScheduler
from .tasks import RefreshWeatherCache

logger = logging.getLogger(__name__)

Coordinates = Tuple[float, float]


class LocationSource(Protocol):
    def pages(self, size: int) -> Iterator[Sequence[Coordinates]]:
        """Yield coordinate pairs in pages of at most ``size`` entries."""
        ...


class WarmCacheDispatcher:
    """Schedule one :class:`RefreshWeatherCache` per known location.

    Identical coordinates belonging to different users are scheduled once per
    user unless ``unique`` is set.
    """

    def __init__(
        self,
        scheduler: WorkScheduler,
        locations: LocationSource,
        *,
        chunk_size: int = 100,
        queue: str = DEFAULT_QUEUE,
        unique: bool = False,
    ) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        self.scheduler = scheduler
        self.locations = locations
        self.chunk_size = chunk_size
        self.queue = queue
        self.unique = unique

    def dispatch(self) -> int:
        """Schedule the refresh tasks and return how many were scheduled."""
        seen: Optional[Set[Coordinates]] = set() if self.unique else None
        scheduled = 0
        for page_number, page in enumerate(self.locations.pages(self.chunk_size), start=1):
            scheduled += self._dispatch_page(page, seen)
            logger.debug("Dispatched weather warm-up page %s", page_number)
        logger.info("Scheduled %s weather refresh tasks on %s", scheduled, self.queue)
        return scheduled

    def _dispatch_page(self, page: Iterable[Coordinates], seen: Optional[Set[Coordinates]]) -> int:
        count = 0
        for lat, lon in page:
            if seen is not None:
                marker = (round(lat, 6), round(lon, 6))
                if marker in seen:
                    continue
                seen.add(marker)
            self.scheduler.schedule(RefreshWeatherCache(lat, lon), self.queue)
            count += 1
        return count


__all__ = ["Coordinates", "LocationSource", "WarmCacheDispatcher"]
