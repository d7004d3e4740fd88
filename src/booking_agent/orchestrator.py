"""Conversation orchestration for a single chat turn.

A turn runs strictly in order: check the caller, normalize attachments and
drop empty messages, run the model/tool graph while streaming text to the
caller, then write the transcript once. A model failure ends the turn with
nothing persisted. A cancelled stream (caller disconnected) also persists
nothing. A failed transcript write is logged and does not affect the caller.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import aclosing
from dataclasses import dataclass
from typing import AsyncIterator, Iterable

from langchain_core.messages import BaseMessage
from langchain_core.runnables import RunnableConfig

from .agent import TURN_CONTEXT_KEY
from .auth import CallerIdentity
from .config import Settings
from .context import TurnContext
from .errors import ConversationNotFound, Unauthorized, classify_model_error
from .history import prepare_history, to_envelopes
from .schemas import MessageEnvelope
from .store import Store
from .transcript import TranscriptWriter

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PreparedTurn:
    context: TurnContext
    kept: list[MessageEnvelope]
    history: list[BaseMessage]


class ConversationOrchestrator:
    def __init__(self, graph, settings: Settings, store: Store) -> None:
        self._graph = graph
        self._settings = settings
        self._store = store
        self._transcripts = TranscriptWriter(store)

    def prepare_turn(
        self,
        conversation_id: str,
        messages: Iterable[MessageEnvelope],
        caller: CallerIdentity | None,
    ) -> PreparedTurn:
        """Authenticate and normalize. Raises Unauthorized, ConversationNotFound or MalformedInput."""
        if caller is None:
            raise Unauthorized("Unauthorized")
        existing = self._store.get_conversation(conversation_id)
        if existing is not None and existing.userId != caller.user_id:
            logger.warning("[AGENT] User %s attempted to write chat %s owned by another user", caller.user_id, conversation_id)
            raise ConversationNotFound("Not Found")
        kept, history = prepare_history(
            messages,
            self._settings.attachment_convention,
            self._settings.public_base_url,
        )
        context = TurnContext(
            conversation_id=conversation_id,
            user_id=caller.user_id,
            settings=self._settings,
            store=self._store,
        )
        return PreparedTurn(context=context, kept=kept, history=history)

    async def _run_graph(self, turn: PreparedTurn, queue: asyncio.Queue) -> None:
        config: RunnableConfig = {
            "configurable": {
                "thread_id": turn.context.conversation_id,
                TURN_CONTEXT_KEY: turn.context,
            }
        }
        try:
            async for mode, payload in self._graph.astream(
                {"messages": turn.history},
                config=config,
                stream_mode=["custom", "values"],
            ):
                queue.put_nowait((mode, payload))
        except Exception as exc:
            queue.put_nowait(("error", exc))
        else:
            queue.put_nowait(("done", None))

    async def stream(self, turn: PreparedTurn) -> AsyncIterator[str]:
        """Yield text deltas as the model produces them, then persist the transcript.

        The graph runs in its own task so this generator can be resumed from a
        different task than the one that started it.
        """
        context = turn.context
        logger.info("[AGENT] Turn started: conversation=%s messages=%d", context.conversation_id, len(turn.history))

        queue: asyncio.Queue = asyncio.Queue()
        producer = asyncio.create_task(self._run_graph(turn, queue))
        final_messages: list[BaseMessage] = list(turn.history)
        try:
            while True:
                mode, payload = await queue.get()
                if mode == "custom":
                    if isinstance(payload, dict) and payload.get("type") == "text" and payload.get("text"):
                        yield payload["text"]
                elif mode == "values":
                    final_messages = list(payload.get("messages", []))
                elif mode == "error":
                    error = classify_model_error(payload)
                    logger.warning(
                        "[AGENT] Model provider failed (%s) for conversation %s: %s",
                        error.kind.value, context.conversation_id, payload,
                    )
                    raise error from payload
                else:
                    break
        finally:
            if not producer.done():
                logger.info("[AGENT] Turn cancelled: conversation=%s", context.conversation_id)
                producer.cancel()

        produced = to_envelopes(final_messages[len(turn.history):])
        logger.info("[AGENT] Turn complete: conversation=%s new_messages=%d", context.conversation_id, len(produced))
        await self._transcripts.aappend(context.conversation_id, context.user_id or "", turn.kept + produced)

    async def process_turn(
        self,
        conversation_id: str,
        messages: Iterable[MessageEnvelope],
        caller: CallerIdentity | None,
    ) -> AsyncIterator[str]:
        turn = self.prepare_turn(conversation_id, messages, caller)
        async with aclosing(self.stream(turn)) as stream:
            async for text in stream:
                yield text
