"""Cache-through scanning of one or many routes"""

import asyncio
from typing import Dict, Iterable, List

from loguru import logger

from .cache import ResultCache, scan_cache_key
from .config import CACHE_TTL_MINUTES
from .models import Route, ScanResult
from .scanner import ScanEngine

log = logger.bind(component="orchestrator")


class ScanOrchestrator:
    """
    Serves route scans from the result cache, scanning only on a miss.

    Successful results (including "no flights") are cached for the TTL;
    errored results never are, so a transient failure is retried next time.
    Identical misses running at the same time share one engine call.
    """

    def __init__(
        self,
        engine: ScanEngine,
        cache: ResultCache,
        ttl_minutes: float = CACHE_TTL_MINUTES,
    ):
        self.engine = engine
        self.cache = cache
        self.ttl_minutes = ttl_minutes
        self._in_flight: Dict[str, "asyncio.Task[ScanResult]"] = {}

    def _cached_result(self, key: str):
        data = self.cache.get(key)
        if data is None:
            return None
        try:
            return ScanResult.from_dict(data)
        except (KeyError, TypeError) as e:
            log.warning(f"Discarding malformed cached scan {key}: {e}")
            self.cache.delete(key)
            return None

    async def _scan_and_store(self, key: str, origin: str, destination: str, date: str) -> ScanResult:
        result = await self.engine.scan(origin, destination, date)

        if result.error is None:
            self.cache.set(key, result.to_dict(), self.ttl_minutes)
            log.info(f"STORED: {origin} → {destination} on {date} (TTL: {self.ttl_minutes}min)")

        return result

    async def scan_route(self, origin: str, destination: str, date: str) -> ScanResult:
        """
        Scan one route, preferring a live cache entry.

        Args:
            origin: Origin airport code
            destination: Destination airport code
            date: Departure date (YYYY-MM-DD)

        Returns:
            ScanResult; cached=True when no new scan was run for this call
        """
        key = scan_cache_key(origin, destination, date)

        cached = self._cached_result(key)
        if cached is not None:
            log.info(f"HIT: {origin} → {destination} on {date}")
            return cached.with_cached(True)

        task = self._in_flight.get(key)
        if task is not None:
            log.info(f"JOIN: {origin} → {destination} on {date} (scan already running)")
            result = await asyncio.shield(task)
            return result.with_cached(True) if result.error is None else result

        log.info(f"MISS: {origin} → {destination} on {date}")

        task = asyncio.ensure_future(self._scan_and_store(key, origin, destination, date))
        self._in_flight[key] = task

        def _forget(done: "asyncio.Task[ScanResult]") -> None:
            if self._in_flight.get(key) is done:
                del self._in_flight[key]

        task.add_done_callback(_forget)

        # Shielded: a scan is never aborted mid-flight, even if this caller goes away
        return await asyncio.shield(task)

    async def scan_multiple_routes(self, routes: Iterable[Route]) -> List[ScanResult]:
        """Scan every route concurrently; results come back in input order"""
        return list(
            await asyncio.gather(
                *(self.scan_route(r.origin, r.destination, r.date) for r in routes)
            )
        )

    def clear_route_cache(self, origin: str, destination: str, date: str) -> None:
        self.cache.delete(scan_cache_key(origin, destination, date))
        log.info(f"CLEARED: {origin} → {destination} on {date}")

    def clear_expired(self) -> int:
        """Sweep expired entries out of the cache"""
        return self.cache.cleanup()
