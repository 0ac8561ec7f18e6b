"""Frontier hub airports and common destinations (a subset of the network)"""

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class Airport:
    code: str
    name: str
    city: str
    state: Optional[str] = None


FRONTIER_AIRPORTS: List[Airport] = [
    # Major hubs
    Airport("DEN", "Denver International", "Denver", "CO"),
    Airport("LAS", "Harry Reid International", "Las Vegas", "NV"),
    Airport("PHX", "Phoenix Sky Harbor", "Phoenix", "AZ"),
    Airport("MCO", "Orlando International", "Orlando", "FL"),
    Airport("ATL", "Hartsfield-Jackson", "Atlanta", "GA"),
    # Focus cities
    Airport("MIA", "Miami International", "Miami", "FL"),
    Airport("FLL", "Fort Lauderdale-Hollywood", "Fort Lauderdale", "FL"),
    Airport("TPA", "Tampa International", "Tampa", "FL"),
    Airport("ORD", "O'Hare International", "Chicago", "IL"),
    Airport("MDW", "Chicago Midway", "Chicago", "IL"),
    Airport("DFW", "Dallas/Fort Worth International", "Dallas", "TX"),
    Airport("IAH", "George Bush Intercontinental", "Houston", "TX"),
    Airport("AUS", "Austin-Bergstrom", "Austin", "TX"),
    Airport("SAN", "San Diego International", "San Diego", "CA"),
    Airport("LAX", "Los Angeles International", "Los Angeles", "CA"),
    Airport("SFO", "San Francisco International", "San Francisco", "CA"),
    Airport("OAK", "Oakland International", "Oakland", "CA"),
    Airport("SJC", "San Jose International", "San Jose", "CA"),
    Airport("SEA", "Seattle-Tacoma", "Seattle", "WA"),
    Airport("PDX", "Portland International", "Portland", "OR"),
    Airport("SLC", "Salt Lake City International", "Salt Lake City", "UT"),
    Airport("MSP", "Minneapolis-Saint Paul", "Minneapolis", "MN"),
    Airport("DTW", "Detroit Metro Wayne County", "Detroit", "MI"),
    Airport("CLE", "Cleveland Hopkins", "Cleveland", "OH"),
    Airport("PHL", "Philadelphia International", "Philadelphia", "PA"),
    Airport("BOS", "Logan International", "Boston", "MA"),
    Airport("JFK", "John F. Kennedy", "New York", "NY"),
    Airport("LGA", "LaGuardia", "New York", "NY"),
    Airport("EWR", "Newark Liberty", "Newark", "NJ"),
    Airport("BWI", "Baltimore/Washington", "Baltimore", "MD"),
    Airport("IAD", "Washington Dulles", "Washington", "DC"),
    Airport("DCA", "Reagan National", "Washington", "DC"),
    Airport("RDU", "Raleigh-Durham", "Raleigh", "NC"),
    Airport("CLT", "Charlotte Douglas", "Charlotte", "NC"),
    Airport("BNA", "Nashville International", "Nashville", "TN"),
    Airport("MSY", "Louis Armstrong New Orleans", "New Orleans", "LA"),
    # Popular destinations
    Airport("CUN", "Cancun International", "Cancun", "Mexico"),
    Airport("SJU", "Luis Muñoz Marín", "San Juan", "PR"),
    Airport("PUJ", "Punta Cana International", "Punta Cana", "DR"),
]


def get_airport_by_code(code: str) -> Optional[Airport]:
    code = code.upper()
    return next((a for a in FRONTIER_AIRPORTS if a.code == code), None)


def search_airports(query: str) -> List[Airport]:
    """Airports whose code, city or name contains the query (case-insensitive)"""
    q = query.lower()
    return [
        a
        for a in FRONTIER_AIRPORTS
        if q in a.code.lower() or q in a.city.lower() or q in a.name.lower()
    ]
