from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import firebase_admin
from firebase_admin import auth, credentials, firestore

from .config import Settings
from .errors import PersistenceError
from .schemas import MessageEnvelope
from .store import Conversation, PaymentRecord, Reservation, Store

logger = logging.getLogger(__name__)

CHATS_COLLECTION = "chats"
RESERVATIONS_COLLECTION = "reservations"
PAYMENTS_COLLECTION = "payments"


def _service_account_path(settings: Settings) -> Optional[Path]:
    if settings.firebase_service_account_key:
        path = Path(settings.firebase_service_account_key).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Firebase service account file not found: {path}")
        return path
    return None


def initialize_firebase(settings: Settings) -> firebase_admin.App:
    if firebase_admin._apps:
        return firebase_admin.get_app()

    svc_path = _service_account_path(settings)
    if svc_path:
        cred = credentials.Certificate(str(svc_path))
        # Project ID is read from the service account JSON
        return firebase_admin.initialize_app(cred)

    # Fallback to application default credentials
    cred = credentials.ApplicationDefault()
    return firebase_admin.initialize_app(cred)


def get_firestore_client(settings: Settings):
    """Get Firestore client, initializing Firebase if needed."""
    initialize_firebase(settings)
    return firestore.client()


def verify_id_token(token: str, settings: Settings) -> Optional[str]:
    """Return the Firebase uid for a valid ID token, or None."""
    initialize_firebase(settings)
    try:
        decoded = auth.verify_id_token(token)
    except (ValueError, auth.InvalidIdTokenError, auth.ExpiredIdTokenError, auth.RevokedIdTokenError) as e:
        logger.info("[AUTH] Rejected Firebase ID token: %s", e)
        return None
    return decoded.get("uid")


class FirestoreStore(Store):
    """Store backed by Firestore collections keyed by document id."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._db = None

    @property
    def db(self):
        if self._db is None:
            self._db = get_firestore_client(self._settings)
        return self._db

    def _get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        try:
            snapshot = self.db.collection(collection).document(doc_id).get()
        except Exception as e:
            raise PersistenceError(f"Failed to read {collection}/{doc_id}: {e}") from e
        if not snapshot.exists:
            return None
        return snapshot.to_dict() or {}

    def _set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        try:
            self.db.collection(collection).document(doc_id).set(data)
        except Exception as e:
            raise PersistenceError(f"Failed to write {collection}/{doc_id}: {e}") from e

    def get_conversation(self, conversation_id: str) -> Conversation | None:
        data = self._get(CHATS_COLLECTION, conversation_id)
        return Conversation.model_validate(data) if data else None

    def save_conversation(self, conversation_id: str, user_id: str, messages: list[MessageEnvelope]) -> None:
        existing = self._get(CHATS_COLLECTION, conversation_id)
        conversation = Conversation(id=conversation_id, userId=user_id, messages=list(messages))
        if existing and existing.get("createdAt"):
            conversation.createdAt = existing["createdAt"]
        conversation.updatedAt = datetime.now(timezone.utc).isoformat()
        self._set(CHATS_COLLECTION, conversation_id, conversation.model_dump())
        logger.info("Saved chat %s with %d messages", conversation_id, len(messages))

    def delete_conversation(self, conversation_id: str) -> bool:
        if self._get(CHATS_COLLECTION, conversation_id) is None:
            return False
        try:
            self.db.collection(CHATS_COLLECTION).document(conversation_id).delete()
        except Exception as e:
            raise PersistenceError(f"Failed to delete chat {conversation_id}: {e}") from e
        return True

    def create_reservation(self, reservation: Reservation) -> None:
        self._set(RESERVATIONS_COLLECTION, reservation.id, reservation.model_dump())

    def get_reservation(self, reservation_id: str) -> Reservation | None:
        data = self._get(RESERVATIONS_COLLECTION, reservation_id)
        return Reservation.model_validate(data) if data else None

    def save_payment(self, payment: PaymentRecord) -> None:
        self._set(PAYMENTS_COLLECTION, payment.id, payment.model_dump())

    def get_payment(self, payment_id: str) -> PaymentRecord | None:
        data = self._get(PAYMENTS_COLLECTION, payment_id)
        return PaymentRecord.model_validate(data) if data else None
