from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class AttachmentEnvelope(BaseModel):
    """Attachment as sent by the chat client (upload id and/or URL)."""

    model_config = ConfigDict(populate_by_name=True)

    file_id: str | None = Field(default=None, alias="fileId")
    url: str | None = None
    content_type: str | None = Field(default=None, alias="contentType")
    size: int | None = Field(default=None, ge=0)
    name: str | None = None


class ToolCallEnvelope(BaseModel):
    id: str
    name: str
    args: dict[str, Any] = Field(default_factory=dict)


class MessageEnvelope(BaseModel):
    """Serializable message payload."""

    role: Literal["user", "assistant", "tool"]
    content: str = ""
    attachments: list[AttachmentEnvelope] = Field(default_factory=list)
    tool_calls: list[ToolCallEnvelope] = Field(default_factory=list)
    tool_call_id: str | None = None


class ChatRequest(BaseModel):
    id: str | None = Field(default=None, description="Conversation id; omitted for a new conversation")
    messages: list[MessageEnvelope]


class TranscriptResponse(BaseModel):
    id: str
    messages: list[MessageEnvelope]


class DeleteResponse(BaseModel):
    success: bool = True


class UploadResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    pathname: str
    content_type: str = Field(alias="contentType")
    size: int
    file_id: str = Field(alias="fileId")


class HealthResponse(BaseModel):
    status: str = "ok"
