"""Tool to issue a boarding pass for a paid reservation."""

from __future__ import annotations

import logging
import random
import uuid
from typing import Optional

from langchain_core.tools import tool

from ..context import TurnContext
from ..errors import PaymentNotVerified, PersistenceError, ToolExecutionError
from .get_reservation_tool import load_reservation
from .schemas import BoardingPassInput

logger = logging.getLogger(__name__)


def _require_verified_payment(context: TurnContext, reservation_id: str, payment_id: str) -> None:
    try:
        payment = context.store.get_payment(payment_id)
    except PersistenceError as exc:
        raise ToolExecutionError("Could not check the payment right now; please try again.", retryable=True) from exc
    if payment is None or payment.reservationId != reservation_id:
        raise PaymentNotVerified(f"No payment {payment_id} exists for reservation {reservation_id}.")
    if payment.status != "verified":
        raise PaymentNotVerified(f"Payment {payment_id} has not been verified yet; call verifyPayment first.")


@tool(args_schema=BoardingPassInput)
def getBoardingPass(
    reservationId: str,
    paymentId: str,
    agent_context: Optional[TurnContext] = None,
) -> dict:
    """Gets a boarding pass by reservation ID.

    Requires a payment for this reservation that verifyPayment has reported as verified.
    """
    if agent_context is None:
        raise ToolExecutionError("No conversation context available to issue boarding passes.")

    reservation = load_reservation(agent_context, reservationId)
    if agent_context.settings.enforce_payment_verification:
        _require_verified_payment(agent_context, reservationId, paymentId)

    rng = random.Random(reservationId)
    logger.info("[BOARDING_PASS] Issued for reservation %s", reservationId)
    return {
        "status": "success",
        "boardingPassId": str(uuid.uuid4()),
        "reservationId": reservationId,
        "flightNumber": reservation.flightNumber,
        "date": reservation.date,
        "passengers": [{"name": p.name, "seat": p.seat} for p in reservation.passengers],
        "gateNumber": f"{rng.choice('ABCDE')}{rng.randint(1, 40)}",
        "boardingTime": "10:30",
        "gateCloseTime": "10:50",
        "terminal": str(rng.randint(1, 5)),
    }
