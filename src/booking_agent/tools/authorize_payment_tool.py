"""Tool to authorize a payment for a reservation."""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from langchain_core.tools import tool

from ..context import TurnContext
from ..errors import PersistenceError, ToolExecutionError
from ..store import PaymentRecord
from .get_reservation_tool import load_reservation
from .schemas import AuthorizePaymentInput

logger = logging.getLogger(__name__)


@tool(args_schema=AuthorizePaymentInput)
def authorizePayment(
    reservationId: str,
    paymentMethod: str,
    amount: float,
    currency: str,
    agent_context: Optional[TurnContext] = None,
) -> dict:
    """Authorizes a payment for a reservation. Returns the payment details.

    Only call this after the user has agreed to pay. The payment is not complete
    until the user confirms it and verifyPayment reports it as verified.
    """
    if agent_context is None:
        raise ToolExecutionError("No conversation context available to authorize payments.")
    load_reservation(agent_context, reservationId)

    payment = PaymentRecord(
        id=str(uuid.uuid4()),
        reservationId=reservationId,
        status="authorized",
        amount=amount,
        currency=currency,
        paymentMethod=paymentMethod,
    )
    try:
        agent_context.store.save_payment(payment)
    except PersistenceError as exc:
        logger.warning("[AUTHORIZE_PAYMENT] Store write failed: %s", exc)
        raise ToolExecutionError("Could not record the payment right now; please try again.", retryable=True) from exc

    logger.info("[AUTHORIZE_PAYMENT] Authorized %s for reservation %s", payment.id, reservationId)
    return {
        "status": "success",
        "paymentId": payment.id,
        "reservationId": reservationId,
        "paymentStatus": payment.status,
        "amount": amount,
        "currency": currency,
        "transactionDate": payment.authorizedAt,
    }
