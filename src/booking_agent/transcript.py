"""Transcript persistence for completed turns."""

from __future__ import annotations

import asyncio
import logging

from .schemas import MessageEnvelope
from .store import Store

logger = logging.getLogger(__name__)


class TranscriptWriter:
    """Writes a conversation's transcript once per completed turn.

    A failed write is logged and dropped; there is no automatic retry. The
    store upserts the whole transcript, so a retry at the storage layer
    cannot duplicate messages.
    """

    def __init__(self, store: Store) -> None:
        self._store = store

    def append(self, conversation_id: str, user_id: str, messages: list[MessageEnvelope]) -> bool:
        if not conversation_id or not messages:
            return False
        try:
            self._store.save_conversation(conversation_id, user_id, messages)
        except Exception:
            logger.exception("[TRANSCRIPT] Failed to save chat %s", conversation_id)
            return False
        logger.info("[TRANSCRIPT] Saved %d message(s) for chat %s", len(messages), conversation_id)
        return True

    async def aappend(self, conversation_id: str, user_id: str, messages: list[MessageEnvelope]) -> bool:
        return await asyncio.to_thread(self.append, conversation_id, user_id, messages)
