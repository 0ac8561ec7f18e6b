"""Request validation and date parsing"""

import re
from typing import List, Optional, Sequence

from dateutil.parser import isoparse
from dateutil.rrule import DAILY, rrule
from loguru import logger

from .config import DEFAULT_MAX_DESTINATIONS, MAX_DESTINATIONS_LIMIT, MAX_ORIGINS
from .exceptions import InvalidRequestError

DATE_FORMAT = re.compile(r"^\d{4}-\d{2}-\d{2}$")
CODE_FORMAT = re.compile(r"^[A-Za-z]{3}$")


def validate_airport_code(code: str) -> str:
    """
    Check a location code is three letters and return it uppercased.

    Raises:
        ValueError: If the code is not exactly three letters
    """
    if not isinstance(code, str) or not CODE_FORMAT.match(code.strip()):
        raise ValueError(f"Invalid airport code '{code}': expected 3 letters")
    return code.strip().upper()


def validate_date(date_str: str) -> str:
    """
    Check a date is YYYY-MM-DD and a real calendar day.

    Raises:
        ValueError: If the format or the date itself is invalid
    """
    if not isinstance(date_str, str) or not DATE_FORMAT.match(date_str):
        raise ValueError(f"Invalid date '{date_str}': expected YYYY-MM-DD")
    try:
        isoparse(date_str)
    except ValueError as e:
        raise ValueError(f"Invalid date '{date_str}': {e}")
    return date_str


def parse_date_or_range(date_spec: str) -> List[str]:
    """
    Parse a single date or an inclusive range.

    Args:
        date_spec: YYYY-MM-DD or YYYY-MM-DD:YYYY-MM-DD

    Returns:
        List of date strings in YYYY-MM-DD format

    Raises:
        ValueError: If a date is invalid or the range runs backwards
    """
    if ":" not in date_spec:
        return [validate_date(date_spec)]

    start_str, end_str = date_spec.split(":", 1)
    start = isoparse(validate_date(start_str)).date()
    end = isoparse(validate_date(end_str)).date()

    if end < start:
        raise ValueError(f"Invalid date range '{date_spec}': end date is before start date")

    return [dt.strftime("%Y-%m-%d") for dt in rrule(DAILY, dtstart=start, until=end)]


def parse_date_list(date_specs: Sequence[str]) -> List[str]:
    """Expand dates and ranges into a sorted, de-duplicated list"""
    all_dates = []
    for spec in date_specs:
        all_dates.extend(parse_date_or_range(spec))

    unique_dates = sorted(set(all_dates))
    if len(unique_dates) != len(all_dates):
        logger.warning(f"Removed {len(all_dates) - len(unique_dates)} duplicate dates from input")

    return unique_dates


def _codes(values: Sequence[str], field: str, issues: List[str]) -> List[str]:
    codes = []
    for value in values:
        try:
            codes.append(validate_airport_code(value))
        except ValueError as e:
            issues.append(f"{field}: {e}")
    return codes


def validate_outbound_request(
    origins: Sequence[str],
    destinations: Optional[Sequence[str]],
    date: str,
):
    """
    Validate an origin(s) x destination(s) request.

    Returns:
        Tuple of (origins, destinations, date) with codes uppercased

    Raises:
        InvalidRequestError: Listing every problem found
    """
    issues: List[str] = []

    if not origins:
        issues.append("origins: at least one origin is required")
    elif len(origins) > MAX_ORIGINS:
        issues.append(f"origins: at most {MAX_ORIGINS} origins are allowed")
    clean_origins = _codes(origins or [], "origins", issues)

    if not destinations:
        issues.append("destinations: please specify at least one destination")
    clean_destinations = _codes(destinations or [], "destinations", issues)

    try:
        validate_date(date)
    except ValueError as e:
        issues.append(f"date: {e}")

    if issues:
        raise InvalidRequestError("Invalid request", details=issues)

    return clean_origins, clean_destinations, date


def validate_anywhere_request(origin: str, date: str, max_destinations: int = DEFAULT_MAX_DESTINATIONS):
    """
    Validate a one-origin, any-destination request.

    Returns:
        Tuple of (origin, date, max_destinations) with the code uppercased

    Raises:
        InvalidRequestError: Listing every problem found
    """
    issues: List[str] = []
    clean_origin = _codes([origin], "origin", issues)

    try:
        validate_date(date)
    except ValueError as e:
        issues.append(f"date: {e}")

    if not isinstance(max_destinations, int) or not 1 <= max_destinations <= MAX_DESTINATIONS_LIMIT:
        issues.append(f"max_destinations: must be between 1 and {MAX_DESTINATIONS_LIMIT}")

    if issues:
        raise InvalidRequestError("Invalid request", details=issues)

    return clean_origin[0], date, max_destinations
