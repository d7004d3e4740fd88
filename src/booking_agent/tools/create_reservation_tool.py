"""Tool to create a reservation for a selected flight and passengers."""

from __future__ import annotations

import datetime as dt
import logging
import random
import uuid
from typing import Optional

from langchain_core.tools import tool

from ..context import TurnContext
from ..errors import PersistenceError, ToolExecutionError, Unauthenticated
from ..store import Reservation, ReservedPassenger, ReturnFlight
from .schemas import CreateReservationInput, PassengerDetails, ReturnFlightDetails

logger = logging.getLogger(__name__)

MIN_FARE_USD = 200
MAX_FARE_USD = 699


def reservation_price(passenger_count: int, round_trip: bool, rng: random.Random | None = None) -> int:
    """Per-passenger fare in [200, 699] USD times passengers, doubled for a round trip."""
    rng = rng or random.Random()
    fare = rng.randint(MIN_FARE_USD, MAX_FARE_USD)
    legs = 2 if round_trip else 1
    return fare * max(passenger_count, 1) * legs


@tool(args_schema=CreateReservationInput)
def createReservation(
    flightNumber: str,
    date: dt.date,
    passengers: list[PassengerDetails],
    returnFlight: Optional[ReturnFlightDetails] = None,
    agent_context: Optional[TurnContext] = None,
) -> dict:
    """Creates a reservation with the selected flights, passenger information, and selected seats."""
    if agent_context is None or not agent_context.user_id:
        raise Unauthenticated("User not authenticated; sign in to create a reservation.")

    reservation = Reservation(
        id=str(uuid.uuid4()),
        userId=agent_context.user_id,
        flightNumber=flightNumber.strip().upper(),
        date=date.isoformat(),
        passengers=[
            ReservedPassenger(name=p.name, email=str(p.email) if p.email else None, seat=p.seat)
            for p in passengers
        ],
        returnFlight=(
            ReturnFlight(
                flightNumber=returnFlight.flightNumber.strip().upper(),
                date=returnFlight.date.isoformat(),
                passengers=[ReservedPassenger(name=p.name, seat=p.seat) for p in returnFlight.passengers],
            )
            if returnFlight
            else None
        ),
        price=reservation_price(len(passengers), returnFlight is not None),
    )

    try:
        agent_context.store.create_reservation(reservation)
    except PersistenceError as exc:
        logger.warning("[CREATE_RESERVATION] Store write failed: %s", exc)
        raise ToolExecutionError("Could not save the reservation right now; please try again.", retryable=True) from exc

    logger.info(
        "[CREATE_RESERVATION] Created %s for user %s (%d passenger(s), %s USD)",
        reservation.id, reservation.userId, len(reservation.passengers), reservation.price,
    )
    return {
        "status": "success",
        "reservationId": reservation.id,
        "price": reservation.price,
        "currency": reservation.currency,
        "flightNumber": reservation.flightNumber,
        "date": reservation.date,
        "passengers": [p.model_dump() for p in reservation.passengers],
        "hasReturnFlight": reservation.returnFlight is not None,
    }
