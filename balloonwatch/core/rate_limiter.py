"""Per-key cooldown for outbound weather queries."""

from __future__ import annotations

import asyncio
import logging
import math
import time
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger("balloonwatch.core.rate_limiter")

T = TypeVar("T")

DEFAULT_MIN_INTERVAL_SECONDS = 1.0
DEFAULT_PRECISION = 2


def round_coordinate(value: float, precision: int = DEFAULT_PRECISION) -> float:
    """Round half away from zero, so 0.125 and -0.125 map symmetrically."""

    factor = 10 ** precision
    return math.copysign(math.floor(abs(value) * factor + 0.5), value) / factor + 0.0


class SnapshotCache:
    """Track when each rounded coordinate was last queried.

    A request for a key issued less than ``min_interval`` seconds after the
    previous one waits out the remainder first. There is no burst capacity:
    one dispatch per key per interval. The next slot for a key is reserved
    before sleeping, so concurrent callers for the same key queue up behind
    each other instead of all waking at once. Keys whose interval has
    elapsed are dropped on the next acquire.
    """

    def __init__(
        self,
        min_interval: float = DEFAULT_MIN_INTERVAL_SECONDS,
        *,
        precision: int = DEFAULT_PRECISION,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.min_interval = min_interval
        self.precision = precision
        self._clock = clock
        self._sleep = sleep
        self._last_issued: dict[str, float] = {}

    def key_for(self, lat: float, lon: float) -> str:
        return "{lat:.{p}f},{lon:.{p}f}".format(
            lat=round_coordinate(lat, self.precision),
            lon=round_coordinate(lon, self.precision),
            p=self.precision,
        )

    def rounded(self, lat: float, lon: float) -> tuple[float, float]:
        return (
            round_coordinate(lat, self.precision),
            round_coordinate(lon, self.precision),
        )

    def _prune(self, now: float) -> None:
        expired = [
            key
            for key, issued in self._last_issued.items()
            if issued + self.min_interval <= now
        ]
        for key in expired:
            del self._last_issued[key]

    async def acquire(self, lat: float, lon: float) -> float:
        """Wait until the key may be queried again; return seconds waited."""

        key = self.key_for(lat, lon)
        now = self._clock()
        self._prune(now)
        last = self._last_issued.get(key)
        wait = 0.0 if last is None else max(0.0, last + self.min_interval - now)

        # reserve the slot before suspending
        self._last_issued[key] = now + wait

        if wait > 0:
            logger.debug("Throttling weather query for %s by %.3fs", key, wait)
            await self._sleep(wait)
        return wait

    async def run(self, lat: float, lon: float, fetch: Callable[[], Awaitable[T]]) -> T:
        await self.acquire(lat, lon)
        return await fetch()

    def last_issued(self, lat: float, lon: float) -> float | None:
        return self._last_issued.get(self.key_for(lat, lon))

    def clear(self) -> None:
        self._last_issued.clear()

    def __len__(self) -> int:
        return len(self._last_issued)


__all__ = ["DEFAULT_MIN_INTERVAL_SECONDS", "SnapshotCache", "round_coordinate"]
