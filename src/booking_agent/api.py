from __future__ import annotations

import logging
import uuid
from functools import lru_cache
from typing import AsyncIterator

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.responses import StreamingResponse

from .agent import get_graph
from .auth import CallerIdentity, get_caller
from .blob_store import BlobStore, create_blob_store
from .config import Settings, get_settings
from .errors import MalformedInput, ModelProviderError, Unauthorized
from .orchestrator import ConversationOrchestrator
from .schemas import ChatRequest, DeleteResponse, HealthResponse, TranscriptResponse, UploadResponse
from .store import Store, create_store

router = APIRouter()

logger = logging.getLogger(__name__)

CONVERSATION_ID_HEADER = "X-Conversation-Id"


@lru_cache
def get_store() -> Store:
    return create_store(get_settings())


@lru_cache
def get_blob_store() -> BlobStore:
    return create_blob_store(get_settings())


def get_orchestrator(
    settings: Settings = Depends(get_settings),
    store: Store = Depends(get_store),
    graph=Depends(get_graph),
) -> ConversationOrchestrator:
    return ConversationOrchestrator(graph, settings, store)


def _require_caller(caller: CallerIdentity | None) -> CallerIdentity:
    if caller is None:
        raise Unauthorized("Unauthorized")
    return caller


def _owned_conversation(store: Store, conversation_id: str, caller: CallerIdentity):
    conversation = store.get_conversation(conversation_id)
    if conversation is None or conversation.userId != caller.user_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
    return conversation


@router.get("/healthz", response_model=HealthResponse)
def healthcheck() -> HealthResponse:
    return HealthResponse()


@router.post("/api/chat")
async def chat(
    payload: ChatRequest,
    caller: CallerIdentity | None = Depends(get_caller),
    orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
):
    """Run one conversation turn and stream the assistant's text back."""
    conversation_id = payload.id or str(uuid.uuid4())
    turn = orchestrator.prepare_turn(conversation_id, payload.messages, caller)
    stream = orchestrator.stream(turn)

    # Wait for the first delta so a provider failure can still set the status code.
    try:
        first = await anext(stream)
    except StopAsyncIteration:
        first = None

    async def body() -> AsyncIterator[str]:
        try:
            if first:
                yield first
            async for text in stream:
                yield text
        except ModelProviderError as exc:
            logger.warning("[AGENT] Stream for chat %s ended early: %s", conversation_id, exc.kind.value)
        finally:
            await stream.aclose()

    return StreamingResponse(
        body(),
        media_type="text/plain; charset=utf-8",
        headers={CONVERSATION_ID_HEADER: conversation_id},
    )


@router.get("/api/chat", response_model=TranscriptResponse)
def get_chat(
    id: str | None = Query(default=None),
    caller: CallerIdentity | None = Depends(get_caller),
    store: Store = Depends(get_store),
) -> TranscriptResponse:
    user = _require_caller(caller)
    if not id:
        raise MalformedInput("Missing chat id")
    conversation = _owned_conversation(store, id, user)
    return TranscriptResponse(id=conversation.id, messages=conversation.messages)


@router.delete("/api/chat", response_model=DeleteResponse)
def delete_chat(
    id: str | None = Query(default=None),
    caller: CallerIdentity | None = Depends(get_caller),
    store: Store = Depends(get_store),
) -> DeleteResponse:
    user = _require_caller(caller)
    if not id:
        raise MalformedInput("Missing chat id")
    _owned_conversation(store, id, user)
    store.delete_conversation(id)
    logger.info("[TRANSCRIPT] Deleted chat %s", id)
    return DeleteResponse()


@router.post("/api/files/upload", response_model=UploadResponse)
async def upload_file(
    file: UploadFile | None = File(default=None),
    caller: CallerIdentity | None = Depends(get_caller),
    blob_store: BlobStore = Depends(get_blob_store),
) -> UploadResponse:
    _require_caller(caller)
    if file is None:
        raise MalformedInput("No file uploaded")
    data = await file.read()
    stored = await blob_store.store(data, file.content_type, file.filename)
    return UploadResponse(
        url=stored.url,
        pathname=stored.url,
        content_type=stored.content_type,
        size=stored.size,
        file_id=stored.reference,
    )
