"""Batch scan entry points: preconditions, rate limiting and summaries"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from .airports import FRONTIER_AIRPORTS, Airport
from .config import DEFAULT_MAX_DESTINATIONS
from .exceptions import InvalidRequestError
from .models import FlightRecord, Route, ScanResult
from .orchestrator import ScanOrchestrator
from .rate_limiter import MinIntervalRateLimiter
from .session_store import SessionStore
from .validation import (
    validate_airport_code,
    validate_anywhere_request,
    validate_date,
    validate_outbound_request,
)

log = logger.bind(component="service")


def _fee_sort_key(flight: FlightRecord) -> float:
    # Unknown fees sort last
    return flight.taxes_and_fees if flight.taxes_and_fees is not None else math.inf


def sort_by_fees(flights: Sequence[FlightRecord]) -> List[FlightRecord]:
    return sorted(flights, key=_fee_sort_key)


@dataclass
class OutboundReport:
    """Outcome of scanning every origin x destination pair for one date"""

    date: str
    total_routes: int
    results: List[ScanResult]
    flights: List[FlightRecord]

    @property
    def route_results(self) -> List[ScanResult]:
        """One result per origin-destination pair"""
        grouped: Dict[str, ScanResult] = {}
        for result in self.results:
            grouped[f"{result.origin}-{result.destination}"] = result
        return list(grouped.values())

    @property
    def summary(self) -> Dict[str, int]:
        return {
            "totalRoutes": self.total_routes,
            "totalFlights": len(self.flights),
            "goWildFlights": sum(1 for f in self.flights if f.is_go_wild),
            "cachedResults": sum(1 for r in self.results if r.cached),
            "errors": sum(1 for r in self.results if r.error),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "date": self.date,
            "summary": self.summary,
            "results": [r.to_dict() for r in self.route_results],
            "flights": [f.to_dict() for f in self.flights],
        }


@dataclass
class DestinationSummary:
    destination: str
    flight_count: int
    go_wild_count: int
    cheapest_go_wild: Optional[FlightRecord]
    cached: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "destination": self.destination,
            "flightCount": self.flight_count,
            "goWildCount": self.go_wild_count,
            "cheapestGoWild": self.cheapest_go_wild.to_dict() if self.cheapest_go_wild else None,
            "cached": self.cached,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class AnywhereReport:
    """Outcome of scanning one origin against many destinations"""

    origin: str
    date: str
    results: List[ScanResult]
    go_wild_flights: List[FlightRecord] = field(default_factory=list)

    @property
    def all_flights(self) -> List[FlightRecord]:
        return [f for r in self.results for f in r.flights]

    @property
    def cheapest_go_wild(self) -> List[FlightRecord]:
        return self.go_wild_flights[:10]

    @property
    def destinations(self) -> List[DestinationSummary]:
        summaries = []
        for r in self.results:
            go_wild = sort_by_fees(r.go_wild_flights)
            summaries.append(
                DestinationSummary(
                    destination=r.destination,
                    flight_count=len(r.flights),
                    go_wild_count=len(go_wild),
                    cheapest_go_wild=go_wild[0] if go_wild else None,
                    cached=r.cached,
                    error=r.error,
                )
            )
        return summaries

    @property
    def summary(self) -> Dict[str, int]:
        return {
            "destinationsScanned": len(self.results),
            "routesWithFlights": sum(1 for r in self.results if r.flights),
            "totalFlights": len(self.all_flights),
            "goWildFlights": len(self.go_wild_flights),
            "cachedResults": sum(1 for r in self.results if r.cached),
            "errors": sum(1 for r in self.results if r.error),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "origin": self.origin,
            "date": self.date,
            "summary": self.summary,
            "goWildFlights": [f.to_dict() for f in self.go_wild_flights],
            "cheapestGoWild": [f.to_dict() for f in self.cheapest_go_wild],
            "allResults": [d.to_dict() for d in self.destinations],
        }


class ScanService:
    """
    The boundary callers go through to scan.

    Every entry point checks, in order: a session is stored, the batch
    rate limit allows it, the request is well formed. Only then is the
    rate-limit clock stamped and scanning started.
    """

    def __init__(
        self,
        session_store: SessionStore,
        orchestrator: ScanOrchestrator,
        rate_limiter: Optional[MinIntervalRateLimiter] = None,
        airports: Sequence[Airport] = FRONTIER_AIRPORTS,
    ):
        self.session_store = session_store
        self.orchestrator = orchestrator
        self.rate_limiter = rate_limiter or MinIntervalRateLimiter()
        self.airports = list(airports)

    def _preconditions(self) -> None:
        self.session_store.require_credential()
        self.rate_limiter.check()

    async def outbound(
        self,
        origins: Sequence[str],
        destinations: Optional[Sequence[str]],
        date: str,
        nonstop_only: bool = False,
    ) -> OutboundReport:
        """
        Scan each origin against each destination on one date.

        Raises:
            NotAuthenticatedError: No stored session
            RateLimitError: Previous batch was too recent
            InvalidRequestError: Bad codes/date or no destinations
        """
        self._preconditions()
        origins, destinations, date = validate_outbound_request(origins, destinations, date)
        self.rate_limiter.mark()

        routes = [
            Route(origin, destination, date)
            for origin in origins
            for destination in destinations
            if origin != destination
        ]
        log.info(f"Scanning {len(routes)} routes on {date}")

        results = await self.orchestrator.scan_multiple_routes(routes)

        flights = [f for r in results for f in r.flights]
        if nonstop_only:
            flights = [f for f in flights if f.stops == 0]

        return OutboundReport(date=date, total_routes=len(routes), results=results, flights=flights)

    async def anywhere(
        self,
        origin: str,
        date: str,
        max_destinations: int = DEFAULT_MAX_DESTINATIONS,
    ) -> AnywhereReport:
        """
        Scan one origin against the first N known airports.

        Raises:
            NotAuthenticatedError: No stored session
            RateLimitError: Previous batch was too recent
            InvalidRequestError: Bad code/date or max_destinations out of range
        """
        self._preconditions()
        origin, date, max_destinations = validate_anywhere_request(origin, date, max_destinations)
        self.rate_limiter.mark()

        destinations = [a.code for a in self.airports if a.code != origin][:max_destinations]
        routes = [Route(origin, destination, date) for destination in destinations]
        log.info(f"Scanning {len(routes)} destinations from {origin}")

        results = await self.orchestrator.scan_multiple_routes(routes)

        go_wild = sort_by_fees([f for r in results for f in r.go_wild_flights])
        return AnywhereReport(origin=origin, date=date, results=results, go_wild_flights=go_wild)

    async def single(self, origin: str, destination: str, date: str) -> ScanResult:
        """
        Scan one route (codes are uppercased).

        Raises:
            NotAuthenticatedError: No stored session
            RateLimitError: Previous batch was too recent
            InvalidRequestError: Missing parameters, bad airport codes or date
        """
        if not origin or not destination or not date:
            raise InvalidRequestError(
                "Missing required parameters: origin, destination, date",
                details=["origin, destination and date are required"],
            )

        self._preconditions()

        issues: List[str] = []
        codes = []
        for field_name, code in (("origin", origin), ("destination", destination)):
            try:
                codes.append(validate_airport_code(code))
            except ValueError as e:
                issues.append(f"{field_name}: {e}")
        try:
            validate_date(date)
        except ValueError as e:
            issues.append(f"date: {e}")
        if issues:
            raise InvalidRequestError("Invalid request", details=issues)

        self.rate_limiter.mark()

        origin, destination = codes
        return await self.orchestrator.scan_route(origin, destination, date)
