"""Gemini File API helpers for chat uploads."""

from __future__ import annotations

import asyncio
import io
import logging
import time
from typing import NamedTuple

from google import genai

from .config import Settings, get_settings

logger = logging.getLogger(__name__)


class UploadedFile(NamedTuple):
    uri: str
    name: str
    mime_type: str


def _get_client(settings: Settings | None = None) -> genai.Client:
    resolved = settings or get_settings()
    return genai.Client(api_key=resolved.google_api_key)


def upload_file_sync(
    data: bytes,
    mime_type: str,
    *,
    display_name: str | None = None,
    settings: Settings | None = None,
    timeout: float = 60.0,
    poll_interval: float = 1.0,
) -> UploadedFile:
    """Upload bytes to the Gemini File API and wait until the file is ACTIVE.

    Images and PDFs are usually ACTIVE immediately; the poll loop covers the
    rare case where processing takes a moment.
    """
    client = _get_client(settings)
    logger.info("[UPLOAD] Uploading to Gemini Files (%d bytes, %s)", len(data), mime_type)

    uploaded = client.files.upload(
        file=io.BytesIO(data),
        config={
            "mime_type": mime_type,
            "display_name": display_name or f"chat-upload-{int(time.time())}",
        },
    )

    started = time.monotonic()
    while uploaded.state.name != "ACTIVE":
        if uploaded.state.name == "FAILED":
            detail = str(uploaded.error) if getattr(uploaded, "error", None) else "unknown error"
            raise RuntimeError(f"Gemini file processing failed: {uploaded.name} - {detail}")
        if time.monotonic() - started > timeout:
            raise TimeoutError(
                f"Gemini file processing timed out after {timeout}s (state={uploaded.state.name})"
            )
        time.sleep(poll_interval)
        uploaded = client.files.get(name=uploaded.name)

    logger.info("[UPLOAD] Gemini file ready: uri=%s", uploaded.uri)
    return UploadedFile(uri=uploaded.uri, name=uploaded.name, mime_type=mime_type)


async def upload_file(
    data: bytes,
    mime_type: str,
    *,
    display_name: str | None = None,
    settings: Settings | None = None,
) -> UploadedFile:
    """Async wrapper; the SDK call runs in a worker thread."""
    return await asyncio.to_thread(
        upload_file_sync,
        data,
        mime_type,
        display_name=display_name,
        settings=settings,
    )
