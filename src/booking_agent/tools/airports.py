from __future__ import annotations

from typing import TypedDict


class Airport(TypedDict):
    code: str
    city: str


AIRPORTS: dict[str, str] = {
    "ATL": "Atlanta",
    "BOS": "Boston",
    "CDG": "Paris",
    "DFW": "Dallas",
    "DXB": "Dubai",
    "FRA": "Frankfurt",
    "HND": "Tokyo",
    "JFK": "New York",
    "LAX": "Los Angeles",
    "LHR": "London",
    "MIA": "Miami",
    "ORD": "Chicago",
    "SEA": "Seattle",
    "SFO": "San Francisco",
    "SIN": "Singapore",
}

_CODE_BY_CITY = {city.lower(): code for code, city in AIRPORTS.items()}


def resolve_airport(value: str) -> Airport:
    """Resolve an airport code or city name to a code/city pair.

    Unknown three-letter values are treated as codes; unknown city names get a
    code made from their first three letters.
    """
    text = value.strip()
    upper = text.upper()
    if upper in AIRPORTS:
        return {"code": upper, "city": AIRPORTS[upper]}
    code = _CODE_BY_CITY.get(text.lower())
    if code:
        return {"code": code, "city": AIRPORTS[code]}
    if len(text) == 3 and text.isalpha():
        return {"code": upper, "city": upper}
    letters = "".join(ch for ch in text if ch.isalpha())
    return {"code": letters[:3].upper(), "city": text.title()}
