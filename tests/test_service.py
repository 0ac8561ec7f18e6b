import pytest

from gowild_scanner.airports import FRONTIER_AIRPORTS
from gowild_scanner.exceptions import InvalidRequestError, NotAuthenticatedError, RateLimitError
from gowild_scanner.models import FlightRecord, ScanResult
from gowild_scanner.rate_limiter import MinIntervalRateLimiter
from gowild_scanner.service import ScanService, sort_by_fees
from tests.conftest import FakeClock


def flight(origin, destination, fees, go_wild=True, stops=0, depart="6:00 AM"):
    return FlightRecord(
        origin=origin,
        destination=destination,
        date="2025-12-15",
        depart_time=depart,
        arrive_time="9:00 AM",
        stops=stops,
        is_go_wild=go_wild,
        taxes_and_fees=fees,
    )


class FakeOrchestrator:
    """Returns canned results per destination and records the routes asked for"""

    def __init__(self, flights=None, errors=(), cached=()):
        self.flights = flights or {}
        self.errors = set(errors)
        self.cached = set(cached)
        self.routes = []

    def _result(self, origin, destination, date):
        if destination in self.errors:
            return ScanResult(origin, destination, date, error="boom")
        return ScanResult(
            origin,
            destination,
            date,
            flights=[f for f in self.flights.get(destination, []) if f.origin == origin],
            cached=destination in self.cached,
        )

    async def scan_multiple_routes(self, routes):
        routes = list(routes)
        self.routes.extend(routes)
        return [self._result(r.origin, r.destination, r.date) for r in routes]

    async def scan_route(self, origin, destination, date):
        self.routes.append((origin, destination, date))
        return self._result(origin, destination, date)


@pytest.fixture
def limiter_clock():
    return FakeClock(0.0)


def make_service(store, orchestrator, limiter_clock):
    return ScanService(store, orchestrator, rate_limiter=MinIntervalRateLimiter(10, clock=limiter_clock))


@pytest.mark.asyncio
async def test_outbound_requires_session(empty_session_store, limiter_clock):
    service = make_service(empty_session_store, FakeOrchestrator(), limiter_clock)

    with pytest.raises(NotAuthenticatedError):
        await service.outbound(["DEN"], ["MCO"], "2025-12-15")


@pytest.mark.asyncio
async def test_not_authenticated_checked_before_validation(empty_session_store, limiter_clock):
    service = make_service(empty_session_store, FakeOrchestrator(), limiter_clock)

    with pytest.raises(NotAuthenticatedError):
        await service.outbound(["DEN"], [], "bad-date")


@pytest.mark.asyncio
async def test_outbound_builds_cross_product_skipping_same_airport(session_store, limiter_clock):
    orchestrator = FakeOrchestrator()
    service = make_service(session_store, orchestrator, limiter_clock)

    report = await service.outbound(["den", "PHX"], ["MCO", "PHX"], "2025-12-15")

    assert [(r.origin, r.destination) for r in orchestrator.routes] == [
        ("DEN", "MCO"),
        ("DEN", "PHX"),
        ("PHX", "MCO"),
    ]
    assert report.total_routes == 3


@pytest.mark.asyncio
async def test_outbound_summary_and_nonstop_filter(session_store, limiter_clock):
    orchestrator = FakeOrchestrator(
        flights={
            "MCO": [flight("DEN", "MCO", 14.99), flight("DEN", "MCO", 89.0, go_wild=False, stops=1)],
            "LAS": [flight("DEN", "LAS", 5.6)],
        },
        errors={"ATL"},
        cached={"LAS"},
    )
    service = make_service(session_store, orchestrator, limiter_clock)

    report = await service.outbound(["DEN"], ["MCO", "LAS", "ATL"], "2025-12-15", nonstop_only=True)

    assert report.summary == {
        "totalRoutes": 3,
        "totalFlights": 2,
        "goWildFlights": 2,
        "cachedResults": 1,
        "errors": 1,
    }
    assert all(f.stops == 0 for f in report.flights)
    data = report.to_dict()
    assert data["success"] is True
    assert [r["destination"] for r in data["results"]] == ["MCO", "LAS", "ATL"]
    assert data["results"][2]["error"] == "boom"


@pytest.mark.asyncio
async def test_outbound_invalid_request(session_store, limiter_clock):
    service = make_service(session_store, FakeOrchestrator(), limiter_clock)

    with pytest.raises(InvalidRequestError):
        await service.outbound(["DEN"], [], "2025-12-15")

    # A rejected request does not start the rate-limit window
    await service.outbound(["DEN"], ["MCO"], "2025-12-15")


@pytest.mark.asyncio
async def test_second_batch_is_rate_limited(session_store, limiter_clock):
    orchestrator = FakeOrchestrator()
    service = make_service(session_store, orchestrator, limiter_clock)

    await service.outbound(["DEN"], ["MCO"], "2025-12-15")
    limiter_clock.advance(2.5)

    with pytest.raises(RateLimitError) as exc:
        await service.anywhere("DEN", "2025-12-15")
    assert exc.value.retry_after == 8
    assert len(orchestrator.routes) == 1

    limiter_clock.advance(7.5)
    await service.anywhere("DEN", "2025-12-15", max_destinations=1)


@pytest.mark.asyncio
async def test_anywhere_scans_first_n_airports_excluding_origin(session_store, limiter_clock):
    orchestrator = FakeOrchestrator()
    service = make_service(session_store, orchestrator, limiter_clock)

    await service.anywhere("las", "2025-12-15", max_destinations=3)

    expected = [a.code for a in FRONTIER_AIRPORTS if a.code != "LAS"][:3]
    assert [r.destination for r in orchestrator.routes] == expected
    assert all(r.origin == "LAS" for r in orchestrator.routes)


@pytest.mark.asyncio
async def test_anywhere_sorts_go_wild_by_fees(session_store, limiter_clock):
    orchestrator = FakeOrchestrator(
        flights={
            "LAS": [flight("DEN", "LAS", 30.0), flight("DEN", "LAS", None)],
            "PHX": [flight("DEN", "PHX", 5.6), flight("DEN", "PHX", 1.0, go_wild=False)],
            "MCO": [flight("DEN", "MCO", 12.0)],
        },
        errors={"ATL"},
    )
    service = make_service(session_store, orchestrator, limiter_clock)

    report = await service.anywhere("DEN", "2025-12-15", max_destinations=4)

    assert [f.taxes_and_fees for f in report.go_wild_flights] == [5.6, 12.0, 30.0, None]
    assert report.summary == {
        "destinationsScanned": 4,
        "routesWithFlights": 3,
        "totalFlights": 5,
        "goWildFlights": 4,
        "cachedResults": 0,
        "errors": 1,
    }
    by_destination = {d.destination: d for d in report.destinations}
    assert by_destination["LAS"].cheapest_go_wild.taxes_and_fees == 30.0
    assert by_destination["PHX"].go_wild_count == 1
    assert by_destination["ATL"].error == "boom"
    assert report.to_dict()["cheapestGoWild"][0]["taxesAndFees"] == 5.6


@pytest.mark.asyncio
async def test_single_requires_all_parameters(empty_session_store, limiter_clock):
    service = make_service(empty_session_store, FakeOrchestrator(), limiter_clock)

    with pytest.raises(InvalidRequestError):
        await service.single("DEN", "", "2025-12-15")


@pytest.mark.asyncio
async def test_single_uppercases_codes(session_store, limiter_clock):
    orchestrator = FakeOrchestrator(flights={"MCO": [flight("DEN", "MCO", 14.99)]})
    service = make_service(session_store, orchestrator, limiter_clock)

    result = await service.single("den", "mco", "2025-12-15")

    assert orchestrator.routes == [("DEN", "MCO", "2025-12-15")]
    assert len(result.flights) == 1


def test_sort_by_fees_unknown_last():
    flights = [flight("DEN", "MCO", None), flight("DEN", "MCO", 3.0), flight("DEN", "MCO", 0.0)]
    assert [f.taxes_and_fees for f in sort_by_fees(flights)] == [0.0, 3.0, None]


@pytest.mark.asyncio
async def test_single_rejects_malformed_codes_before_scanning(session_store, limiter_clock):
    orchestrator = FakeOrchestrator()
    service = make_service(session_store, orchestrator, limiter_clock)

    with pytest.raises(InvalidRequestError) as exc:
        await service.single("DENVER", "M1O", "2025-12-15")

    assert [d.split(":")[0] for d in exc.value.details] == ["origin", "destination"]
    assert orchestrator.routes == []
    # Rejected request leaves the rate-limit window closed
    await service.single("DEN", "MCO", "2025-12-15")
