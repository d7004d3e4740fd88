"""Tool to select seats for passengers on a flight.

Two passengers asking for the same seat are not rejected here; the seat map
simply marks the seat as selected once.
"""

from __future__ import annotations

import datetime as dt
import logging
import random
import re
from typing import Any, Optional

from langchain_core.tools import tool

from ..context import TurnContext
from ..errors import ToolExecutionError
from .schemas import SeatAssignment, SelectSeatsInput

logger = logging.getLogger(__name__)

ROWS = 30
SEAT_LETTERS = "ABCDEF"
WINDOW_SEATS = {"A", "F"}
AISLE_SEATS = {"C", "D"}

_SEAT_RE = re.compile(r"^(\d{1,2})([A-F])$")


def seat_kind(letter: str) -> str:
    if letter in WINDOW_SEATS:
        return "window"
    if letter in AISLE_SEATS:
        return "aisle"
    return "middle"


def build_seat_map(flight_number: str, date: dt.date, selected: set[str]) -> list[list[dict[str, Any]]]:
    """Return rows of seats with availability and price; selected seats are always available."""
    rng = random.Random(f"{flight_number}|{date.isoformat()}|seats")
    rows = []
    for row in range(1, ROWS + 1):
        seats = []
        for letter in SEAT_LETTERS:
            seat_number = f"{row}{letter}"
            is_selected = seat_number in selected
            seats.append({
                "seatNumber": seat_number,
                "kind": seat_kind(letter),
                "priceInUSD": 150 if row <= 4 else (60 if letter in WINDOW_SEATS | AISLE_SEATS else 40),
                "isAvailable": is_selected or rng.random() > 0.35,
                "isSelected": is_selected,
            })
        rows.append(seats)
    return rows


@tool(args_schema=SelectSeatsInput)
def selectSeats(
    flightNumber: str,
    date: dt.date,
    passengers: list[SeatAssignment],
    agent_context: Optional[TurnContext] = None,
) -> dict:
    """Selects seats for passengers on a particular flight. Returns available and selected seats."""
    flight_number = flightNumber.strip().upper()
    for passenger in passengers:
        match = _SEAT_RE.match(passenger.seat)
        if not match or int(match.group(1)) > ROWS:
            raise ToolExecutionError(
                f"Seat {passenger.seat} does not exist on {flight_number}; rows are 1-{ROWS}, letters A-F."
            )

    selected = {passenger.seat for passenger in passengers}
    logger.info("[SELECT_SEATS] %s on %s: %s", flight_number, date, sorted(selected))

    return {
        "status": "success",
        "flightNumber": flight_number,
        "date": date.isoformat(),
        "passengers": [
            {"name": passenger.name, "seat": passenger.seat, "kind": seat_kind(passenger.seat[-1])}
            for passenger in passengers
        ],
        "seats": build_seat_map(flight_number, date, selected),
    }
