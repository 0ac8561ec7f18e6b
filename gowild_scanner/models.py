"""Data models and enums for the GoWild scanner"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from .config import DEFAULT_CURRENCY


class LoginState(Enum):
    """Interactive login flow states"""

    IDLE = "idle"
    LAUNCHING = "launching"
    WAITING_FOR_LOGIN = "waiting_for_login"
    LOGGED_IN = "logged_in"
    ERROR = "error"
    CANCELLED = "cancelled"


class PollStatus(Enum):
    """Outcome of a single login poll"""

    WAITING = "waiting"
    LOGGED_IN = "logged_in"
    ERROR = "error"
    NO_BROWSER = "no_browser"


@dataclass
class CookieRecord:
    """One browser cookie, in Playwright's shape"""

    name: str
    value: str
    domain: str
    path: str = "/"
    expires: float = -1
    http_only: bool = False
    secure: bool = False
    same_site: str = "Lax"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "domain": self.domain,
            "path": self.path,
            "expires": self.expires,
            "httpOnly": self.http_only,
            "secure": self.secure,
            "sameSite": self.same_site,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CookieRecord":
        return cls(
            name=data["name"],
            value=data["value"],
            domain=data.get("domain", ""),
            path=data.get("path", "/"),
            expires=data.get("expires", -1),
            http_only=data.get("httpOnly", False),
            secure=data.get("secure", False),
            same_site=data.get("sameSite", "Lax"),
        )


@dataclass
class SessionCredential:
    """Stored cookie set plus the epoch-ms it was saved at"""

    cookies: List[CookieRecord]
    saved_at: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cookies": [c.to_dict() for c in self.cookies],
            "savedAt": self.saved_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionCredential":
        return cls(
            cookies=[CookieRecord.from_dict(c) for c in data.get("cookies") or []],
            saved_at=data.get("savedAt") or 0,
        )


@dataclass(frozen=True)
class FlightRecord:
    """One scraped flight offer"""

    origin: str
    destination: str
    date: str
    depart_time: str
    arrive_time: str
    stops: int
    is_go_wild: bool
    taxes_and_fees: Optional[float]
    currency: str = DEFAULT_CURRENCY
    raw_price: Optional[str] = None
    duration: Optional[str] = None
    stop_locations: Optional[List[str]] = None
    flight_numbers: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "origin": self.origin,
            "destination": self.destination,
            "date": self.date,
            "departTime": self.depart_time,
            "arriveTime": self.arrive_time,
            "stops": self.stops,
            "isGoWild": self.is_go_wild,
            "taxesAndFees": self.taxes_and_fees,
            "currency": self.currency,
        }
        # Optional fields are omitted rather than serialized as null
        optional = {
            "rawPrice": self.raw_price,
            "duration": self.duration,
            "stopLocations": self.stop_locations,
            "flightNumbers": self.flight_numbers,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FlightRecord":
        return cls(
            origin=data["origin"],
            destination=data["destination"],
            date=data["date"],
            depart_time=data["departTime"],
            arrive_time=data["arriveTime"],
            stops=data["stops"],
            is_go_wild=data["isGoWild"],
            taxes_and_fees=data.get("taxesAndFees"),
            currency=data.get("currency", DEFAULT_CURRENCY),
            raw_price=data.get("rawPrice"),
            duration=data.get("duration"),
            stop_locations=data.get("stopLocations"),
            flight_numbers=data.get("flightNumbers"),
        )


@dataclass
class ScanResult:
    """Outcome of scanning one route on one date"""

    origin: str
    destination: str
    date: str
    flights: List[FlightRecord] = field(default_factory=list)
    scanned_at: int = 0
    cached: bool = False
    error: Optional[str] = None

    @property
    def go_wild_flights(self) -> List[FlightRecord]:
        return [f for f in self.flights if f.is_go_wild]

    def with_cached(self, cached: bool = True) -> "ScanResult":
        return replace(self, cached=cached)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "origin": self.origin,
            "destination": self.destination,
            "date": self.date,
            "flights": [f.to_dict() for f in self.flights],
            "scannedAt": self.scanned_at,
            "cached": self.cached,
        }
        if self.error is not None:
            data["error"] = self.error
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScanResult":
        return cls(
            origin=data["origin"],
            destination=data["destination"],
            date=data["date"],
            flights=[FlightRecord.from_dict(f) for f in data.get("flights", [])],
            scanned_at=data.get("scannedAt", 0),
            cached=data.get("cached", False),
            error=data.get("error"),
        )


@dataclass(frozen=True)
class Route:
    """One origin/destination/date query"""

    origin: str
    destination: str
    date: str
