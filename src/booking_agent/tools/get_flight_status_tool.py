"""Tool to look up the status of a flight (synthetic, deterministic per flight and date)."""

from __future__ import annotations

import datetime as dt
import logging
import random
from typing import Optional

from langchain_core.tools import tool

from ..context import TurnContext
from .airports import AIRPORTS
from .schemas import FlightStatusInput

logger = logging.getLogger(__name__)

FLIGHT_STATUSES = ("on_time", "on_time", "delayed", "boarding", "departed")


@tool(args_schema=FlightStatusInput)
def getFlightStatus(
    flightNumber: str,
    date: dt.date,
    agent_context: Optional[TurnContext] = None,
) -> dict:
    """Gets the status of a flight by flight number and date."""
    flight_number = flightNumber.strip().upper()
    rng = random.Random(f"{flight_number}|{date.isoformat()}")
    origin, destination = rng.sample(sorted(AIRPORTS), 2)

    scheduled_departure = dt.datetime.combine(date, dt.time(hour=rng.randint(5, 21), minute=rng.choice((0, 15, 30, 45))))
    scheduled_arrival = scheduled_departure + dt.timedelta(minutes=rng.randint(75, 720))
    flight_status = rng.choice(FLIGHT_STATUSES)
    delay = dt.timedelta(minutes=rng.choice((15, 30, 45, 90)) if flight_status == "delayed" else 0)

    logger.info("[FLIGHT_STATUS] %s on %s: %s", flight_number, date, flight_status)

    return {
        "status": "success",
        "flightNumber": flight_number,
        "flightStatus": flight_status,
        "departure": {
            "cityName": AIRPORTS[origin],
            "airportCode": origin,
            "scheduledTime": scheduled_departure.isoformat(),
            "estimatedTime": (scheduled_departure + delay).isoformat(),
            "terminal": str(rng.randint(1, 5)),
            "gate": f"{rng.choice('ABCDE')}{rng.randint(1, 40)}",
        },
        "arrival": {
            "cityName": AIRPORTS[destination],
            "airportCode": destination,
            "scheduledTime": scheduled_arrival.isoformat(),
            "estimatedTime": (scheduled_arrival + delay).isoformat(),
            "terminal": str(rng.randint(1, 5)),
            "gate": f"{rng.choice('ABCDE')}{rng.randint(1, 40)}",
        },
        "totalDistanceInMiles": rng.randint(200, 6000),
    }
