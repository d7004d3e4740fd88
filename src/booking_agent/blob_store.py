"""Upload storage for chat attachments."""

from __future__ import annotations

import asyncio
import logging
import mimetypes
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from .config import Settings
from .errors import MalformedInput

logger = logging.getLogger(__name__)

PUBLIC_UPLOAD_PREFIX = "/uploads"


@dataclass(slots=True, frozen=True)
class StoredBlob:
    """What the upload route returns: a reference the chat client echoes back as fileId."""

    reference: str
    url: str
    size: int
    content_type: str


def validate_upload(size: int, content_type: str | None, settings: Settings) -> str:
    """Check size and type limits. Returns the normalized content type."""
    if size <= 0:
        raise MalformedInput("No file uploaded")
    if size > settings.max_upload_bytes:
        limit_mb = settings.max_upload_bytes // (1024 * 1024)
        raise MalformedInput(f"File size should be less than {limit_mb}MB")
    normalized = (content_type or "").split(";")[0].strip().lower()
    if not (normalized.startswith("image/") or normalized == "application/pdf"):
        raise MalformedInput("File type should be an image or a PDF")
    return normalized


def _extension(content_type: str) -> str:
    """File suffix for a validated content type; the client filename is never trusted."""
    guessed = mimetypes.guess_extension(content_type) or ".bin"
    return guessed.lstrip(".")


class BlobStore(ABC):
    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    async def store(self, data: bytes, content_type: str | None, filename: str | None = None) -> StoredBlob:
        normalized = validate_upload(len(data), content_type, self._settings)
        return await self._put(data, normalized, filename)

    @abstractmethod
    async def _put(self, data: bytes, content_type: str, filename: str | None) -> StoredBlob: ...


class LocalBlobStore(BlobStore):
    """Writes uploads to UPLOAD_DIR, served by the app under /uploads."""

    @property
    def directory(self) -> Path:
        return Path(self._settings.upload_dir)

    def _write(self, name: str, data: bytes) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        (self.directory / name).write_bytes(data)

    async def _put(self, data: bytes, content_type: str, filename: str | None) -> StoredBlob:
        name = f"{uuid.uuid4()}.{_extension(content_type)}"
        await asyncio.to_thread(self._write, name, data)
        url = f"{PUBLIC_UPLOAD_PREFIX}/{name}"
        logger.info("[UPLOAD] Stored %s (%d bytes, %s)", url, len(data), content_type)
        return StoredBlob(reference=url, url=url, size=len(data), content_type=content_type)


class GeminiFilesBlobStore(BlobStore):
    """Uploads to the Gemini File API; the file URI is the inline reference."""

    async def _put(self, data: bytes, content_type: str, filename: str | None) -> StoredBlob:
        from .gemini_files import upload_file

        uploaded = await upload_file(data, content_type, display_name=filename, settings=self._settings)
        return StoredBlob(reference=uploaded.uri, url=uploaded.uri, size=len(data), content_type=content_type)


def create_blob_store(settings: Settings) -> BlobStore:
    if settings.blob_store_backend == "gemini":
        return GeminiFilesBlobStore(settings)
    return LocalBlobStore(settings)
