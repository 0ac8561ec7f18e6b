"""Flight card parser for rendered Frontier result pages"""

import re
from typing import Iterable, List, Optional

from .config import DEFAULT_CURRENCY, GO_WILD_MARKERS, NO_FLIGHTS_MARKERS, UNKNOWN_TIME
from .models import FlightRecord

TIME_PATTERN = re.compile(r"(\d{1,2}:\d{2}\s*(?:AM|PM)?)", re.IGNORECASE)
STOPS_PATTERN = re.compile(r"(\d+)\s*stop|nonstop|direct", re.IGNORECASE)
PRICE_PATTERN = re.compile(r"\$[\d,.]+")
NUMBER_PREFIX = re.compile(r"\d+(?:\.\d*)?|\.\d+")


class FlightCardParser:
    """Parse the text content of one flight card into a FlightRecord"""

    @staticmethod
    def parse_card(
        card_text: Optional[str],
        origin: str,
        destination: str,
        date: str,
    ) -> FlightRecord:
        """
        Build a flight record from a card's text using pattern heuristics.

        Args:
            card_text: Text content of the card element (may be None)
            origin: Origin airport code
            destination: Destination airport code
            date: Departure date (YYYY-MM-DD)

        Returns:
            Parsed flight record
        """
        text = card_text or ""

        times = extract_times(text)
        raw_price = extract_raw_price(text)

        return FlightRecord(
            origin=origin,
            destination=destination,
            date=date,
            depart_time=times[0] if len(times) > 0 else UNKNOWN_TIME,
            arrive_time=times[1] if len(times) > 1 else UNKNOWN_TIME,
            stops=parse_stops(text),
            is_go_wild=is_go_wild(text),
            taxes_and_fees=parse_price(raw_price) if raw_price else None,
            currency=DEFAULT_CURRENCY,
            raw_price=raw_price,
        )


def parse_time(time_str: str) -> str:
    """Trim and collapse internal whitespace ('10:05   PM' -> '10:05 PM')"""
    return re.sub(r"\s+", " ", time_str.strip())


def extract_times(text: str) -> List[str]:
    """All time-like substrings in page order"""
    return [parse_time(t) for t in TIME_PATTERN.findall(text)]


def parse_stops(text: str) -> int:
    """Stop count: nonstop/direct is 0, 'N stop(s)' is N, anything else 0"""
    match = STOPS_PATTERN.search(text)
    if not match:
        return 0

    matched = match.group(0).lower()
    if "nonstop" in matched or "direct" in matched:
        return 0

    try:
        return int(match.group(1))
    except (TypeError, ValueError):
        return 0


def is_go_wild(text: str, markers: Iterable[str] = GO_WILD_MARKERS) -> bool:
    """Case-insensitive substring check against the GoWild marker phrases"""
    lower_text = text.lower()
    return any(marker.lower() in lower_text for marker in markers)


def extract_raw_price(text: str) -> Optional[str]:
    """First currency-formatted substring, e.g. '$1,234.50'"""
    match = PRICE_PATTERN.search(text)
    return match.group(0) if match else None


def parse_price(price_str: Optional[str]) -> Optional[float]:
    """
    Strip everything but digits and periods, then parse.

    Returns None when nothing numeric remains ('$...' or 'Contact airline').
    """
    if not price_str:
        return None

    cleaned = re.sub(r"[^0-9.]", "", price_str)
    # Leading numeric prefix only, so '12.50.' still reads as 12.5
    number = NUMBER_PREFIX.match(cleaned)
    return float(number.group(0)) if number else None


def has_no_flights_marker(page_content: str, markers: Iterable[str] = NO_FLIGHTS_MARKERS) -> bool:
    """True if the page explicitly says there is nothing to show"""
    return any(marker in page_content for marker in markers)
