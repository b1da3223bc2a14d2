"""Background unit of work that refreshes the cached weather for a location."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, ClassVar, NamedTuple, Optional, Tuple

from .entities import WeatherData

if TYPE_CHECKING:
    from .providers.base import WeatherProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefreshWeatherCache:
    """Fetch live weather for ``(lat, lon)`` through the active provider."""

    lat: float
    lon: float

    tries: ClassVar[int] = 3
    backoff: ClassVar[Tuple[int, ...]] = (10, 30, 60)

    def handle(self, provider: Optional["WeatherProvider"] = None) -> Optional[WeatherData]:
        if provider is None:
            from .providers.registry import get_weather_provider

            provider = get_weather_provider()
        return provider.refresh_now(self.lat, self.lon)

    def backoff_for(self, attempt: int) -> int:
        """Delay in seconds after the given failed attempt (1-based)."""
        index = min(max(attempt, 1), len(self.backoff)) - 1
        return self.backoff[index]


class Attempt(NamedTuple):
    """Outcome of one attempt: success, or the delay before the next try."""

    succeeded: bool
    retry_in: Optional[int] = None


def run_attempt(
    task: RefreshWeatherCache,
    attempt: int,
    *,
    provider: Optional["WeatherProvider"] = None,
) -> Attempt:
    """Run attempt number ``attempt`` (1-based) of ``task``.

    ``retry_in`` is ``None`` once the task succeeded or was dropped after its
    last attempt.
    """
    try:
        task.handle(provider)
    except Exception:
        if attempt >= task.tries:
            logger.exception(
                "Dropping weather refresh for %s,%s after %s attempts", task.lat, task.lon, attempt
            )
            return Attempt(succeeded=False)
        delay = task.backoff_for(attempt)
        logger.warning(
            "Weather refresh for %s,%s failed (attempt %s/%s), retrying in %ss",
            task.lat,
            task.lon,
            attempt,
            task.tries,
            delay,
            exc_info=True,
        )
        return Attempt(succeeded=False, retry_in=delay)
    return Attempt(succeeded=True)


def run_with_retries(
    task: RefreshWeatherCache,
    *,
    sleep: Callable[[float], None] = time.sleep,
    provider: Optional["WeatherProvider"] = None,
) -> bool:
    """Run ``task`` inline until it succeeds or runs out of attempts.

    Returns ``True`` when an attempt completed without raising.
    """
    for attempt in range(1, task.tries + 1):
        outcome = run_attempt(task, attempt, provider=provider)
        if outcome.retry_in is None:
            return outcome.succeeded
        sleep(outcome.retry_in)
    return False


__all__ = ["Attempt", "RefreshWeatherCache", "run_attempt", "run_with_retries"]
