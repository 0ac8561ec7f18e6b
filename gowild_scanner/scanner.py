"""Browser-driven scan of one route on one date"""

import time
from typing import Callable, List, Optional, Sequence
from urllib.parse import urlencode

from loguru import logger

from .browser import BrowserFactory, launch_browser, new_page
from .browser_pool import BrowserSlotPool
from .config import (
    NAVIGATION_TIMEOUT_MS,
    SEARCH_PASSENGERS,
    SEARCH_TRIP_TYPE,
    SEARCH_URL,
    SETTLE_DELAY_MS,
)
from .models import FlightRecord, ScanResult
from .parser import FlightCardParser, has_no_flights_marker
from .session_store import SessionStore
from .storage import DebugArtifactStorage
from .strategies import SelectorStrategy, default_strategies, find_flight_cards

log = logger.bind(component="scanner")


def build_search_url(origin: str, destination: str, date: str) -> str:
    """One-way, one-adult search results URL"""
    params = {
        "from": origin,
        "to": destination,
        "departure": date,
        **SEARCH_PASSENGERS,
        "tripType": SEARCH_TRIP_TYPE,
    }
    return f"{SEARCH_URL}?{urlencode(params)}"


class ScanEngine:
    """
    Scrapes flight cards for a single origin/destination/date.

    - Browser slots bound how many scans drive a browser at once
    - Stored session cookies are attached to every hidden browser
    - Errors never escape scan(): they come back as ScanResult.error
    """

    def __init__(
        self,
        session_store: SessionStore,
        pool: Optional[BrowserSlotPool] = None,
        browser_factory: BrowserFactory = launch_browser,
        strategies: Optional[Sequence[SelectorStrategy]] = None,
        debug_storage: Optional[DebugArtifactStorage] = None,
        settle_delay_ms: int = SETTLE_DELAY_MS,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize scan engine.

        Args:
            session_store: Source of the session cookies
            pool: Browser slot pool (defaults to a fresh pool of MAX_BROWSERS)
            browser_factory: Launches a browser for each scan
            strategies: Card-finding strategies, tried in order
            debug_storage: Where to put captures of pages with no cards
            settle_delay_ms: Wait after network idle for client-side rendering
            clock: Returns the current time in epoch seconds
        """
        self.session_store = session_store
        self.pool = pool or BrowserSlotPool()
        self.browser_factory = browser_factory
        self.strategies: List[SelectorStrategy] = list(strategies or default_strategies())
        self.debug_storage = debug_storage or DebugArtifactStorage()
        self.settle_delay_ms = settle_delay_ms
        self.clock = clock

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    async def scan(self, origin: str, destination: str, date: str) -> ScanResult:
        """
        Scan one route.

        Args:
            origin: Origin airport code
            destination: Destination airport code
            date: Departure date (YYYY-MM-DD)

        Returns:
            ScanResult with flights in page order, or with error set

        Raises:
            NotAuthenticatedError: If no session credential is stored
        """
        credential = self.session_store.require_credential()

        async with self.pool.slot():
            try:
                async with self.browser_factory(True) as browser:
                    page = await new_page(browser, credential)

                    search_url = build_search_url(origin, destination, date)
                    log.info(f"Searching: {origin} → {destination} on {date}")
                    log.debug(f"URL: {search_url}")

                    await page.goto(search_url, wait_until="networkidle", timeout=NAVIGATION_TIMEOUT_MS)
                    await page.wait_for_timeout(self.settle_delay_ms)

                    flights = await self.extract_flights(page, origin, destination, date)

            except Exception as e:
                log.error(f"Error scanning {origin} → {destination}: {e}")
                return ScanResult(
                    origin=origin,
                    destination=destination,
                    date=date,
                    flights=[],
                    scanned_at=self._now_ms(),
                    error=str(e) or type(e).__name__,
                )

        return ScanResult(
            origin=origin,
            destination=destination,
            date=date,
            flights=flights,
            scanned_at=self._now_ms(),
        )

    async def extract_flights(self, page, origin: str, destination: str, date: str) -> List[FlightRecord]:
        """Turn the rendered results page into flight records"""
        content = await page.content()
        if has_no_flights_marker(content):
            log.info(f"No flights found for {origin} → {destination}")
            return []

        result = await find_flight_cards(page, self.strategies)
        if not result.matched:
            # Can't tell "no availability" from "markup changed": keep a capture
            log.warning(f"No flight cards found for {origin} → {destination}, saving page capture")
            await self.debug_storage.save_page_capture(
                page, origin, destination, date, [s.selector for s in self.strategies]
            )
            return []

        flights = []
        for i, card in enumerate(result.cards):
            try:
                card_text = await card.text_content()
                flights.append(FlightCardParser.parse_card(card_text, origin, destination, date))
            except Exception as e:
                log.warning(f"Error parsing flight card {i}: {e}")

        log.success(f"Extracted {len(flights)} flights for {origin} → {destination} on {date}")
        return flights
