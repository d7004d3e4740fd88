"""Tool to search for flights between two airports (synthetic results)."""

from __future__ import annotations

import datetime as dt
import logging
import random
from typing import Any, Optional

from langchain_core.tools import tool

from ..context import TurnContext
from .airports import resolve_airport
from .schemas import FindFlightsInput

logger = logging.getLogger(__name__)

AIRLINES = (
    ("UA", "United Airlines"),
    ("AA", "American Airlines"),
    ("DL", "Delta Air Lines"),
    ("B6", "JetBlue"),
    ("AS", "Alaska Airlines"),
    ("BA", "British Airways"),
)

RESULT_COUNT = 4

CABIN_MULTIPLIER = {"economy": 1.0, "premium": 1.6, "business": 3.2, "first": 5.0}


def sample_flights(origin: str, destination: str, date: dt.date, cabin_class: str = "economy") -> list[dict[str, Any]]:
    """Generate a deterministic list of sample flights for a route and date."""
    departure_airport = resolve_airport(origin)
    arrival_airport = resolve_airport(destination)
    rng = random.Random(f"{departure_airport['code']}|{arrival_airport['code']}|{date.isoformat()}")

    flights = []
    for _ in range(RESULT_COUNT):
        code, airline = rng.choice(AIRLINES)
        departure = dt.datetime.combine(date, dt.time(hour=rng.randint(5, 21), minute=rng.choice((0, 15, 30, 45))))
        duration = dt.timedelta(minutes=rng.randint(75, 720))
        base_price = rng.randint(120, 900)
        flight_number = f"{code}{rng.randint(100, 9999)}"
        flights.append({
            "id": f"{flight_number}-{date.isoformat()}",
            "flightNumber": flight_number,
            "airline": airline,
            "departure": {
                "cityName": departure_airport["city"],
                "airportCode": departure_airport["code"],
                "timestamp": departure.isoformat(),
            },
            "arrival": {
                "cityName": arrival_airport["city"],
                "airportCode": arrival_airport["code"],
                "timestamp": (departure + duration).isoformat(),
            },
            "durationInMinutes": int(duration.total_seconds() // 60),
            "numberOfStops": rng.choice((0, 0, 1, 2)),
            "priceInUSD": round(base_price * CABIN_MULTIPLIER.get(cabin_class, 1.0)),
        })
    flights.sort(key=lambda flight: flight["departure"]["timestamp"])
    return flights


@tool(args_schema=FindFlightsInput)
def findFlights(
    origin: str,
    destination: str,
    date: dt.date,
    returnDate: Optional[dt.date] = None,
    passengers: Optional[int] = None,
    cabinClass: Optional[str] = None,
    agent_context: Optional[TurnContext] = None,
) -> dict:
    """Searches for flights based on the origin, destination, and date."""
    cabin = cabinClass or "economy"
    logger.info("[FIND_FLIGHTS] %s -> %s on %s (%s)", origin, destination, date, cabin)

    result: dict[str, Any] = {
        "status": "success",
        "flights": sample_flights(origin, destination, date, cabin),
        "cabinClass": cabin,
        "passengers": passengers or 1,
    }
    if returnDate:
        result["returnFlights"] = sample_flights(destination, origin, returnDate, cabin)
    return result
