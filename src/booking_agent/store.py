"""Persistence store interface and the in-memory backend.

The store is keyed by opaque ids. Writes for different conversations are
independent; the in-memory backend only locks around dict access.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field

from .config import Settings
from .schemas import MessageEnvelope

logger = logging.getLogger(__name__)


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class ReservedPassenger(BaseModel):
    name: str
    email: str | None = None
    seat: str


class ReturnFlight(BaseModel):
    flightNumber: str
    date: str
    passengers: list[ReservedPassenger] = Field(default_factory=list)


class Reservation(BaseModel):
    id: str
    userId: str
    flightNumber: str
    date: str
    passengers: list[ReservedPassenger]
    returnFlight: ReturnFlight | None = None
    price: int
    currency: str = "USD"
    createdAt: str = Field(default_factory=_utcnow)


class PaymentRecord(BaseModel):
    id: str
    reservationId: str
    status: Literal["authorized", "verified"]
    amount: float
    currency: str
    paymentMethod: str
    authorizedAt: str = Field(default_factory=_utcnow)
    verifiedAt: str | None = None


class Conversation(BaseModel):
    id: str
    userId: str
    messages: list[MessageEnvelope]
    createdAt: str = Field(default_factory=_utcnow)
    updatedAt: str = Field(default_factory=_utcnow)


class Store(ABC):
    """Durable CRUD for transcripts, reservations and payment records."""

    @abstractmethod
    def get_conversation(self, conversation_id: str) -> Conversation | None: ...

    @abstractmethod
    def save_conversation(self, conversation_id: str, user_id: str, messages: list[MessageEnvelope]) -> None:
        """Upsert the full transcript for a conversation."""

    @abstractmethod
    def delete_conversation(self, conversation_id: str) -> bool: ...

    @abstractmethod
    def create_reservation(self, reservation: Reservation) -> None: ...

    @abstractmethod
    def get_reservation(self, reservation_id: str) -> Reservation | None: ...

    @abstractmethod
    def save_payment(self, payment: PaymentRecord) -> None: ...

    @abstractmethod
    def get_payment(self, payment_id: str) -> PaymentRecord | None: ...


class InMemoryStore(Store):
    """Process-local store for development and tests."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._conversations: dict[str, dict[str, Any]] = {}
        self._reservations: dict[str, dict[str, Any]] = {}
        self._payments: dict[str, dict[str, Any]] = {}

    def get_conversation(self, conversation_id: str) -> Conversation | None:
        with self._lock:
            data = self._conversations.get(conversation_id)
        return Conversation.model_validate(data) if data else None

    def save_conversation(self, conversation_id: str, user_id: str, messages: list[MessageEnvelope]) -> None:
        with self._lock:
            existing = self._conversations.get(conversation_id)
            conversation = Conversation(id=conversation_id, userId=user_id, messages=list(messages))
            if existing:
                conversation.createdAt = existing["createdAt"]
            self._conversations[conversation_id] = conversation.model_dump()

    def delete_conversation(self, conversation_id: str) -> bool:
        with self._lock:
            return self._conversations.pop(conversation_id, None) is not None

    def create_reservation(self, reservation: Reservation) -> None:
        with self._lock:
            self._reservations[reservation.id] = reservation.model_dump()

    def get_reservation(self, reservation_id: str) -> Reservation | None:
        with self._lock:
            data = self._reservations.get(reservation_id)
        return Reservation.model_validate(data) if data else None

    def save_payment(self, payment: PaymentRecord) -> None:
        with self._lock:
            self._payments[payment.id] = payment.model_dump()

    def get_payment(self, payment_id: str) -> PaymentRecord | None:
        with self._lock:
            data = self._payments.get(payment_id)
        return PaymentRecord.model_validate(data) if data else None


def create_store(settings: Settings) -> Store:
    """Build a store based on configuration."""

    if settings.store_backend == "memory":
        logger.info("Using in-memory store")
        return InMemoryStore()

    from .firebase import FirestoreStore

    return FirestoreStore(settings)
