"""Hourly balloon position feed ingestion."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

import httpx

from balloonwatch.config import settings
from balloonwatch.core.ingest import parse_triple
from balloonwatch.models.geo import Snapshot

logger = logging.getLogger("balloonwatch.ingestors.balloons")


class FeedUnavailableError(RuntimeError):
    """Raised internally when one feed attempt fails."""


class BalloonFeedIngestor:
    """Fetch hourly snapshots of raw ``[lon, lat, alt]`` triples."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.base_url = (base_url or settings.feed_base_url).rstrip("/")
        self.timeout = timeout or settings.feed_timeout
        self.retries = max(retries or settings.feed_retries, 1)
        self.backoff_seconds = (
            settings.feed_backoff_seconds if backoff_seconds is None else backoff_seconds
        )
        self.transport = transport
        self._sleep = sleep

    def url_for(self, hour: int) -> str:
        return f"{self.base_url}/{hour:02d}.json"

    async def _fetch_once(self, client: httpx.AsyncClient, hour: int) -> list[Any]:
        try:
            response = await client.get(self.url_for(hour), headers={"Accept": "application/json"})
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise FeedUnavailableError(f"Feed request for hour {hour:02d} timed out") from exc
        except httpx.HTTPStatusError as exc:
            raise FeedUnavailableError(
                f"Feed returned HTTP {exc.response.status_code} for hour {hour:02d}"
            ) from exc
        except httpx.RequestError as exc:
            raise FeedUnavailableError(f"Feed request for hour {hour:02d} failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise FeedUnavailableError(f"Feed returned invalid JSON for hour {hour:02d}") from exc

        if not isinstance(payload, list):
            logger.warning("Unexpected feed payload type for hour %02d: %s", hour, type(payload).__name__)
            return []
        return payload

    async def fetch_raw(self, hour: int) -> list[Any]:
        """Fetch one hour with bounded exponential backoff.

        Returns an empty list ("no data for this period") once every attempt
        has failed.
        """

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            for attempt in range(self.retries):
                try:
                    return await self._fetch_once(client, hour)
                except FeedUnavailableError as exc:
                    logger.warning(
                        "Attempt %s/%s failed for hour %02d: %s",
                        attempt + 1,
                        self.retries,
                        hour,
                        exc,
                    )
                    if attempt < self.retries - 1:
                        await self._sleep(self.backoff_seconds * (2 ** attempt))

        logger.error("Giving up on feed hour %02d after %s attempts", hour, self.retries)
        return []

    async def fetch_hour(self, hour: int) -> Snapshot:
        """Fetch one hour as a snapshot of valid ``[lon, lat, alt]`` floats."""

        raw = await self.fetch_raw(hour)
        entries = [list(triple) for triple in map(parse_triple, raw) if triple is not None]
        if len(entries) != len(raw):
            logger.debug(
                "Filtered %s invalid entries from hour %02d", len(raw) - len(entries), hour
            )
        return Snapshot(hour_offset=hour, entries=entries)

    async def fetch_recent(self, hours: int | None = None) -> list[Snapshot]:
        """Fetch the most recent ``hours`` snapshots, newest (offset 0) first.

        The current hour is fetched on its own first. If it has data the
        remaining hours are fetched concurrently; otherwise the whole window,
        current hour included, is fetched again concurrently.
        """

        window = hours or settings.history_hours
        current = await self.fetch_hour(0)
        if current.entries:
            logger.info("Fetched current balloon snapshot (%s entries)", len(current.entries))
            rest = await asyncio.gather(*(self.fetch_hour(h) for h in range(1, window)))
            return [current, *rest]

        logger.warning("Current balloon snapshot empty; refetching full window")
        return list(await asyncio.gather(*(self.fetch_hour(h) for h in range(window))))


__all__ = ["BalloonFeedIngestor", "FeedUnavailableError"]
