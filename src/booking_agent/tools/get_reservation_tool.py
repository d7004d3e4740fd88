"""Tool to fetch a reservation by id."""

from __future__ import annotations

import logging
from typing import Optional

from langchain_core.tools import tool

from ..context import TurnContext
from ..errors import NotFound, PersistenceError, ToolExecutionError
from ..store import Reservation
from .schemas import ReservationIdInput

logger = logging.getLogger(__name__)


def load_reservation(context: TurnContext, reservation_id: str) -> Reservation:
    """Read a reservation visible to the caller; other users' reservations read as missing."""
    try:
        reservation = context.store.get_reservation(reservation_id)
    except PersistenceError as exc:
        logger.warning("[GET_RESERVATION] Store read failed: %s", exc)
        raise ToolExecutionError("Could not load the reservation right now; please try again.", retryable=True) from exc
    if reservation is None or (context.user_id and reservation.userId != context.user_id):
        raise NotFound(f"Reservation {reservation_id} was not found.")
    return reservation


@tool(args_schema=ReservationIdInput)
def getReservation(
    reservationId: str,
    agent_context: Optional[TurnContext] = None,
) -> dict:
    """Gets a reservation by ID."""
    if agent_context is None:
        raise ToolExecutionError("No conversation context available to look up reservations.")
    reservation = load_reservation(agent_context, reservationId)
    return {"status": "success", "reservation": reservation.model_dump()}
