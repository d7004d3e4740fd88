"""Tool to verify a previously authorized payment."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from langchain_core.tools import tool

from ..context import TurnContext
from ..errors import NotFound, PersistenceError, ToolExecutionError
from .get_reservation_tool import load_reservation
from .schemas import VerifyPaymentInput

logger = logging.getLogger(__name__)


@tool(args_schema=VerifyPaymentInput)
def verifyPayment(
    paymentId: str,
    agent_context: Optional[TurnContext] = None,
) -> dict:
    """Verifies a payment by payment ID."""
    if agent_context is None:
        raise ToolExecutionError("No conversation context available to verify payments.")

    try:
        payment = agent_context.store.get_payment(paymentId)
    except PersistenceError as exc:
        raise ToolExecutionError("Could not load the payment right now; please try again.", retryable=True) from exc
    if payment is None:
        raise NotFound(f"Payment {paymentId} was not found.")
    load_reservation(agent_context, payment.reservationId)

    if payment.status != "verified":
        payment.status = "verified"
        payment.verifiedAt = datetime.now(timezone.utc).isoformat()
        try:
            agent_context.store.save_payment(payment)
        except PersistenceError as exc:
            logger.warning("[VERIFY_PAYMENT] Store write failed: %s", exc)
            raise ToolExecutionError("Could not update the payment right now; please try again.", retryable=True) from exc
        logger.info("[VERIFY_PAYMENT] Verified %s for reservation %s", payment.id, payment.reservationId)

    return {
        "status": "success",
        "paymentId": payment.id,
        "reservationId": payment.reservationId,
        "paymentStatus": payment.status,
        "verificationDate": payment.verifiedAt,
    }
