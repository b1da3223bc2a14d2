"""Fire-and-forget scheduling of refresh tasks."""
from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from typing import Callable, Dict, Optional, Protocol, Set

from django.core.exceptions import ImproperlyConfigured

from .config import WeatherConfig
from .tasks import RefreshWeatherCache, run_attempt, run_with_retries

logger = logging.getLogger(__name__)

DEFAULT_QUEUE = "default"


class WorkScheduler(Protocol):
    def schedule(self, task: RefreshWeatherCache, queue: str = DEFAULT_QUEUE) -> None:
        ...


class SyncScheduler:
    """Run tasks inline, including their retries.

    Blocks the caller for the whole refresh, so it is only built explicitly
    (``warm_weather_cache --sync``) and never serves the request path.
    """

    def __init__(self, sleep: Callable[[float], None] = time.sleep) -> None:
        self._sleep = sleep

    def schedule(self, task: RefreshWeatherCache, queue: str = DEFAULT_QUEUE) -> None:
        run_with_retries(task, sleep=self._sleep)


class ThreadPoolScheduler:
    """Run tasks on worker threads, one pool per queue name.

    A failed attempt does not hold its worker during the backoff: a timer
    resubmits the next attempt to the pool once the delay has passed.
    Pending retries are cancelled by :meth:`shutdown`.
    """

    def __init__(self, max_workers: int = 4, timer: Callable[..., threading.Timer] = threading.Timer) -> None:
        self.max_workers = max_workers
        self._timer = timer
        self._executors: Dict[str, ThreadPoolExecutor] = {}
        self._timers: Set[threading.Timer] = set()
        self._lock = threading.Lock()
        self._closed = False

    def schedule(self, task: RefreshWeatherCache, queue: str = DEFAULT_QUEUE) -> None:
        self._submit(task, queue, 1)
        logger.debug("Queued weather refresh for %s,%s on %s", task.lat, task.lon, queue)

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            self._closed = True
            timers = list(self._timers)
            self._timers.clear()
            executors = list(self._executors.values())
            self._executors.clear()
        for timer in timers:
            timer.cancel()
        for executor in executors:
            executor.shutdown(wait=wait)

    def _submit(self, task: RefreshWeatherCache, queue: str, attempt: int) -> None:
        with self._lock:
            if self._closed:
                logger.warning("Scheduler is shut down, dropping weather refresh for %s,%s", task.lat, task.lon)
                return
            executor = self._executors.get(queue)
            if executor is None:
                executor = ThreadPoolExecutor(
                    max_workers=self.max_workers,
                    thread_name_prefix=f"weather-{queue}",
                )
                self._executors[queue] = executor
            executor.submit(self._run, task, queue, attempt)

    def _run(self, task: RefreshWeatherCache, queue: str, attempt: int) -> None:
        outcome = run_attempt(task, attempt)
        if outcome.retry_in is None:
            return

        def resubmit() -> None:
            with self._lock:
                self._timers.discard(timer)
            self._submit(task, queue, attempt + 1)

        timer = self._timer(outcome.retry_in, resubmit)
        timer.daemon = True
        with self._lock:
            if self._closed:
                return
            self._timers.add(timer)
        timer.start()


def build_scheduler(config: Optional[WeatherConfig] = None) -> WorkScheduler:
    config = config or WeatherConfig()
    driver = config.get("weather.scheduler.driver", "thread")
    if driver == "thread":
        return ThreadPoolScheduler(max_workers=int(config.get("weather.scheduler.workers", 4)))
    raise ImproperlyConfigured(f"Unsupported weather scheduler driver: {driver!r}")


@lru_cache(maxsize=1)
def get_scheduler() -> WorkScheduler:
    return build_scheduler()


__all__ = [
    "DEFAULT_QUEUE",
    "SyncScheduler",
    "ThreadPoolScheduler",
    "WorkScheduler",
    "build_scheduler",
    "get_scheduler",
]
