"""Argument schemas for the booking tools.

Field descriptions are forwarded to the model for tool selection.
"""

from __future__ import annotations

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field

SEAT_PATTERN = r"^[1-9][0-9]?[A-F]$"

FLIGHT_NUMBER_DESCRIPTION = "Flight number, including airline code and number (e.g., BA142)"
SEAT_DESCRIPTION = "Seat number (e.g., 12A, 12B). Format is [row number][seat letter]."


class FindFlightsInput(BaseModel):
    origin: str = Field(..., min_length=2, description="Origin airport code (3 letters) or city name")
    destination: str = Field(..., min_length=2, description="Destination airport code (3 letters) or city name")
    date: dt.date = Field(..., description="Date of travel (YYYY-MM-DD)")
    returnDate: Optional[dt.date] = Field(default=None, description="Return date (YYYY-MM-DD) for round trip flights")
    passengers: Optional[int] = Field(default=None, gt=0, description="Number of passengers")
    cabinClass: Optional[Literal["economy", "premium", "business", "first"]] = Field(
        default=None, description="Cabin class (economy, premium, business, first)"
    )


class FlightStatusInput(BaseModel):
    flightNumber: str = Field(..., min_length=3, description=FLIGHT_NUMBER_DESCRIPTION)
    date: dt.date = Field(..., description="Date of the flight (YYYY-MM-DD)")


class SeatAssignment(BaseModel):
    name: str = Field(..., min_length=1, description="Passenger name")
    seat: str = Field(..., pattern=SEAT_PATTERN, description=SEAT_DESCRIPTION)


class SelectSeatsInput(BaseModel):
    flightNumber: str = Field(..., min_length=3, description=FLIGHT_NUMBER_DESCRIPTION)
    date: dt.date = Field(..., description="Date of the flight (YYYY-MM-DD)")
    passengers: list[SeatAssignment] = Field(..., min_length=1, description="Array of passengers and their selected seats")


class PassengerDetails(BaseModel):
    name: str = Field(..., min_length=1, description="Passenger name")
    email: Optional[EmailStr] = Field(default=None, description="Passenger email")
    seat: str = Field(..., pattern=SEAT_PATTERN, description=SEAT_DESCRIPTION)


class ReturnFlightDetails(BaseModel):
    flightNumber: str = Field(..., min_length=3, description="Return flight number, including airline code and number (e.g., BA143)")
    date: dt.date = Field(..., description="Date of the return flight (YYYY-MM-DD)")
    passengers: list[SeatAssignment] = Field(default_factory=list, description="Array of passengers and their selected seats")


class CreateReservationInput(BaseModel):
    flightNumber: str = Field(..., min_length=3, description=FLIGHT_NUMBER_DESCRIPTION)
    date: dt.date = Field(..., description="Date of the flight (YYYY-MM-DD)")
    passengers: list[PassengerDetails] = Field(..., min_length=1, description="Array of passengers and their selected seats")
    returnFlight: Optional[ReturnFlightDetails] = Field(default=None, description="Return flight information")


class ReservationIdInput(BaseModel):
    reservationId: str = Field(..., min_length=1, description="Reservation ID")


class AuthorizePaymentInput(BaseModel):
    reservationId: str = Field(..., min_length=1, description="Reservation ID")
    paymentMethod: Literal["credit_card", "paypal", "apple_pay", "google_pay"] = Field(
        ..., description="Payment method (credit_card, paypal, apple_pay, google_pay)"
    )
    amount: float = Field(..., gt=0, description="Payment amount")
    currency: str = Field(..., pattern=r"^[A-Z]{3}$", description="Payment currency (USD, EUR, GBP, etc.)")


class VerifyPaymentInput(BaseModel):
    paymentId: str = Field(..., min_length=1, description="Payment ID")


class BoardingPassInput(BaseModel):
    reservationId: str = Field(..., min_length=1, description="Reservation ID")
    paymentId: str = Field(..., min_length=1, description="Payment ID")
