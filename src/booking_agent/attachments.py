"""Attachment normalization for the two model-provider input conventions.

Clients send attachments either as an opaque upload id (an inline reference,
consumed directly by Gemini) or as a URL (consumed by OpenAI-style providers).
This module turns the client envelope into exactly one of the two reference
types and then into the content block the active provider expects. It never
fetches bytes. Upload ids from the local blob store are site-relative paths,
so they are handled as URLs and made absolute like any other relative URL.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal, Union
from urllib.parse import urlsplit

from .errors import UnsupportedAttachmentShape
from .schemas import AttachmentEnvelope

logger = logging.getLogger(__name__)

AttachmentConvention = Literal["inline", "url"]


@dataclass(frozen=True, slots=True)
class InlineReference:
    upload_id: str
    size: int | None = None
    content_type: str | None = None


@dataclass(frozen=True, slots=True)
class UrlReference:
    url: str
    content_type: str | None = None


Attachment = Union[InlineReference, UrlReference]


def is_site_relative(reference: str) -> bool:
    """True for paths served by this app, e.g. /uploads/a.png."""
    parts = urlsplit(reference)
    return not parts.scheme and not parts.netloc and reference.startswith("/")


def to_absolute_url(url: str, base_url: str) -> str:
    """Join a site-relative path onto base_url with exactly one slash between them.

    Protocol-relative URLs (//host/path) take the base URL's scheme.
    """
    if urlsplit(url).scheme:
        return url
    if url.startswith("//"):
        return f"{urlsplit(base_url).scheme or 'https'}:{url}"
    path = url if url.startswith("/") else f"/{url}"
    return f"{base_url.rstrip('/')}{path}"


def coerce_attachment(raw: AttachmentEnvelope, convention: AttachmentConvention) -> Attachment:
    """Pick the single reference variant to use for an incoming attachment.

    When the client supplied both an upload id and a URL, the variant the active
    provider consumes natively wins. An upload id that is a site-relative path
    (the local blob store's /uploads/... reference) is a URL, not a provider file.
    """
    file_id = (raw.file_id or "").strip()
    url = (raw.url or "").strip()
    if file_id and is_site_relative(file_id):
        url = url or file_id
        file_id = ""

    if file_id and url:
        if convention == "inline":
            return InlineReference(upload_id=file_id, size=raw.size, content_type=raw.content_type)
        return UrlReference(url=url, content_type=raw.content_type)
    if file_id:
        return InlineReference(upload_id=file_id, size=raw.size, content_type=raw.content_type)
    if url:
        return UrlReference(url=url, content_type=raw.content_type)
    raise UnsupportedAttachmentShape("Attachment has neither an upload id nor a URL.")


def _url_block(url: str, content_type: str | None) -> dict[str, Any]:
    if content_type and not content_type.startswith("image/"):
        return {"type": "file", "source_type": "url", "url": url, "mime_type": content_type}
    return {"type": "image_url", "image_url": {"url": url}}


def normalize_attachment(
    attachment: Attachment,
    convention: AttachmentConvention,
    base_url: str,
) -> dict[str, Any]:
    """Return the provider-native content block for one attachment."""
    if isinstance(attachment, InlineReference):
        if is_site_relative(attachment.upload_id):
            return _url_block(to_absolute_url(attachment.upload_id, base_url), attachment.content_type)
        if convention != "inline":
            raise UnsupportedAttachmentShape(
                f"Upload '{attachment.upload_id}' must be resolved to a URL before it can be sent to this model provider."
            )
        block: dict[str, Any] = {
            "type": "media",
            "file_uri": attachment.upload_id,
            "mime_type": attachment.content_type or "application/octet-stream",
        }
        if attachment.size is not None:
            block["size"] = attachment.size
        return block

    if isinstance(attachment, UrlReference):
        return _url_block(to_absolute_url(attachment.url, base_url), attachment.content_type)

    raise UnsupportedAttachmentShape(f"Unknown attachment type: {type(attachment).__name__}")


def normalize_attachments(
    raw_attachments: list[AttachmentEnvelope],
    convention: AttachmentConvention,
    base_url: str,
) -> list[dict[str, Any]]:
    blocks = [
        normalize_attachment(coerce_attachment(raw, convention), convention, base_url)
        for raw in raw_attachments
    ]
    if blocks:
        logger.info("[ATTACHMENTS] Normalized %d attachment(s) for %s convention", len(blocks), convention)
    return blocks
