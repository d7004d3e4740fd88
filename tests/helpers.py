"""Shared test helpers (fake chat model, tool invocation with context)."""

from __future__ import annotations

from typing import Any, Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage
from langchain_core.outputs import ChatGeneration, ChatResult
from pydantic import Field

from booking_agent.context import TurnContext


class FakeChatModel(BaseChatModel):
    """Chat model that replays canned responses in order.

    Only _generate is implemented, so astream() yields each response as a
    single chunk. Every call records the messages it received.
    """

    responses: list[AIMessage] = Field(default_factory=list)
    error: Optional[Exception] = None
    calls: list[list[BaseMessage]] = Field(default_factory=list)

    @property
    def _llm_type(self) -> str:
        return "fake-chat"

    def bind_tools(self, tools, **kwargs):
        return self

    def _generate(self, messages, stop=None, run_manager=None, **kwargs) -> ChatResult:
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        message = self.responses.pop(0) if self.responses else AIMessage(content="")
        return ChatResult(generations=[ChatGeneration(message=message)])


def tool_call(name: str, args: dict[str, Any], call_id: str = "call-1") -> dict[str, Any]:
    return {"id": call_id, "name": name, "args": args, "type": "tool_call"}


def invoke_with_context(tool, context: TurnContext | None, **kwargs):
    """Call a tool's handler directly with the request-scoped context.

    Arguments are validated against the tool's schema first, as the runner does.
    """
    validated = tool.args_schema.model_validate(kwargs)
    args = {name: getattr(validated, name) for name in type(validated).model_fields}
    return tool.func(**args, agent_context=context)


async def collect(stream) -> list[str]:
    return [chunk async for chunk in stream]
