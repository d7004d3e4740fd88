"""Conversion between wire messages and LangChain messages."""

from __future__ import annotations

import json
from typing import Any, Iterable

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, ToolMessage

from .attachments import AttachmentConvention, normalize_attachments
from .errors import MalformedInput
from .schemas import MessageEnvelope, ToolCallEnvelope


def is_empty_message(message: MessageEnvelope) -> bool:
    return not message.content.strip() and not message.attachments and not message.tool_calls


def drop_empty_messages(messages: Iterable[MessageEnvelope]) -> list[MessageEnvelope]:
    """Remove messages with no text, attachments or tool calls, keeping order."""
    return [message for message in messages if not is_empty_message(message)]


def extract_text(content: Any) -> str:
    """Extract text from message content (string or list of content blocks)."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "".join(parts)
    return ""


def _coerce_content(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def to_langchain_message(
    envelope: MessageEnvelope,
    convention: AttachmentConvention,
    base_url: str,
) -> BaseMessage:
    if envelope.role == "user":
        if not envelope.attachments:
            return HumanMessage(content=envelope.content)
        content: list[str | dict[str, Any]] = []
        if envelope.content:
            content.append({"type": "text", "text": envelope.content})
        content.extend(normalize_attachments(envelope.attachments, convention, base_url))
        return HumanMessage(content=content)

    if envelope.role == "assistant":
        if envelope.attachments:
            raise MalformedInput("assistant messages cannot carry attachments")
        return AIMessage(
            content=envelope.content,
            tool_calls=[
                {"id": call.id, "name": call.name, "args": call.args, "type": "tool_call"}
                for call in envelope.tool_calls
            ],
        )

    if not envelope.tool_call_id:
        raise MalformedInput("tool messages must include tool_call_id")
    return ToolMessage(content=envelope.content, tool_call_id=envelope.tool_call_id)


def prepare_history(
    messages: Iterable[MessageEnvelope],
    convention: AttachmentConvention,
    base_url: str,
) -> tuple[list[MessageEnvelope], list[BaseMessage]]:
    """Drop empty messages and convert the rest, preserving order.

    Returns the kept envelopes (for the transcript) alongside their LangChain form.
    """
    kept = drop_empty_messages(messages)
    return kept, [to_langchain_message(envelope, convention, base_url) for envelope in kept]


def to_envelopes(messages: Iterable[BaseMessage]) -> list[MessageEnvelope]:
    """Convert the assistant and tool messages produced during a turn back into wire envelopes."""
    envelopes: list[MessageEnvelope] = []
    for message in messages:
        if isinstance(message, ToolMessage):
            envelopes.append(
                MessageEnvelope(
                    role="tool",
                    content=_coerce_content(message.content),
                    tool_call_id=message.tool_call_id,
                )
            )
        elif isinstance(message, AIMessage):
            envelopes.append(
                MessageEnvelope(
                    role="assistant",
                    content=extract_text(message.content),
                    tool_calls=[
                        ToolCallEnvelope(id=call["id"] or "", name=call["name"], args=call.get("args") or {})
                        for call in message.tool_calls
                    ],
                )
            )
    return drop_empty_messages(envelopes)
