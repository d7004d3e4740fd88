"""Tool registry for the booking agent."""

from __future__ import annotations

from collections.abc import Sequence
from types import MappingProxyType
from typing import Mapping

from langchain_core.tools import BaseTool

from .authorize_payment_tool import authorizePayment
from .create_reservation_tool import createReservation
from .find_flights_tool import findFlights
from .get_boarding_pass_tool import getBoardingPass
from .get_flight_status_tool import getFlightStatus
from .get_reservation_tool import getReservation
from .select_seats_tool import selectSeats
from .verify_payment_tool import verifyPayment

_REGISTERED_TOOLS: tuple[BaseTool, ...] = (
    findFlights,
    getFlightStatus,
    selectSeats,
    createReservation,
    getReservation,
    authorizePayment,
    verifyPayment,
    getBoardingPass,
)

_TOOLS_BY_NAME: Mapping[str, BaseTool] = MappingProxyType({tool.name: tool for tool in _REGISTERED_TOOLS})


def get_registered_tools() -> Sequence[BaseTool]:
    """Return all tools available to the agent."""

    return _REGISTERED_TOOLS


def get_tools_by_name() -> Mapping[str, BaseTool]:
    """Read-only mapping for tool lookup by name."""

    return _TOOLS_BY_NAME


__all__ = [
    "get_registered_tools",
    "get_tools_by_name",
]
