"""Tests for upload storage."""

from __future__ import annotations

import asyncio
from pathlib import Path
from unittest.mock import patch

import pytest

from booking_agent.blob_store import (
    GeminiFilesBlobStore,
    LocalBlobStore,
    create_blob_store,
    validate_upload,
)
from booking_agent.errors import MalformedInput
from booking_agent.gemini_files import UploadedFile


class TestValidateUpload:
    @pytest.mark.parametrize("content_type", ["image/png", "image/jpeg", "application/pdf", "IMAGE/PNG; charset=binary"])
    def test_accepts_images_and_pdf(self, settings, content_type):
        assert validate_upload(100, content_type, settings) in {"image/png", "image/jpeg", "application/pdf"}

    @pytest.mark.parametrize("content_type", ["text/plain", "video/mp4", None, ""])
    def test_rejects_other_types(self, settings, content_type):
        with pytest.raises(MalformedInput):
            validate_upload(100, content_type, settings)

    def test_five_mib_limit(self, settings):
        assert validate_upload(5 * 1024 * 1024, "image/png", settings) == "image/png"
        with pytest.raises(MalformedInput, match="5MB"):
            validate_upload(5 * 1024 * 1024 + 1, "image/png", settings)

    def test_rejects_empty_file(self, settings):
        with pytest.raises(MalformedInput):
            validate_upload(0, "image/png", settings)


class TestLocalBlobStore:
    async def test_writes_file_under_upload_dir(self, settings):
        stored = await LocalBlobStore(settings).store(b"%PDF-1.4", "application/pdf", "ticket.pdf")

        assert stored.url.startswith("/uploads/") and stored.url.endswith(".pdf")
        assert stored.reference == stored.url
        assert stored.size == 8
        written = Path(settings.upload_dir) / stored.url.rsplit("/", 1)[-1]
        assert written.read_bytes() == b"%PDF-1.4"

    async def test_extension_from_content_type_when_name_has_none(self, settings):
        stored = await LocalBlobStore(settings).store(b"\x89PNG", "image/png", "screenshot")
        assert stored.url.endswith(".png")

    async def test_client_filename_extension_is_ignored(self, settings):
        stored = await LocalBlobStore(settings).store(b"<script>alert(1)</script>", "image/png", "x.html")

        assert stored.url.endswith(".png")
        assert not list(Path(settings.upload_dir).glob("*.html"))

    async def test_write_runs_off_the_event_loop(self, settings):
        with patch("booking_agent.blob_store.asyncio.to_thread", wraps=asyncio.to_thread) as to_thread:
            stored = await LocalBlobStore(settings).store(b"\x89PNG", "image/png", "a.png")

        to_thread.assert_called_once()
        assert (Path(settings.upload_dir) / stored.url.rsplit("/", 1)[-1]).exists()

    async def test_unique_names(self, settings):
        blob_store = LocalBlobStore(settings)
        first = await blob_store.store(b"a", "image/png", "a.png")
        second = await blob_store.store(b"b", "image/png", "a.png")
        assert first.url != second.url


class TestGeminiFilesBlobStore:
    @patch("booking_agent.gemini_files.upload_file")
    async def test_returns_file_uri_as_reference(self, mock_upload, settings):
        mock_upload.return_value = UploadedFile(
            uri="https://generativelanguage.googleapis.com/v1beta/files/abc", name="files/abc", mime_type="image/png"
        )

        stored = await GeminiFilesBlobStore(settings).store(b"\x89PNG", "image/png", "a.png")

        assert stored.reference == "https://generativelanguage.googleapis.com/v1beta/files/abc"
        mock_upload.assert_awaited_once()

    async def test_validates_before_upload(self, settings):
        with patch("booking_agent.gemini_files.upload_file") as mock_upload:
            with pytest.raises(MalformedInput):
                await GeminiFilesBlobStore(settings).store(b"hello", "text/plain", "a.txt")
        mock_upload.assert_not_called()


class TestCreateBlobStore:
    def test_local(self, settings):
        assert isinstance(create_blob_store(settings), LocalBlobStore)

    def test_gemini(self, settings):
        assert isinstance(create_blob_store(settings.model_copy(update={"blob_store_backend": "gemini"})), GeminiFilesBlobStore)
