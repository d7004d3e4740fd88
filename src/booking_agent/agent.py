from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, SystemMessage, message_chunk_to_message
from langchain_core.runnables import RunnableConfig
from langchain_core.tools import BaseTool
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI
from langgraph.graph import END, START, MessagesState, StateGraph
from langgraph.types import StreamWriter

from .config import Settings, get_settings
from .context import TurnContext
from .history import extract_text
from .prompts import get_system_prompt
from .tools import get_registered_tools
from .tools.runner import execute_tool_call

logger = logging.getLogger(__name__)

TURN_CONTEXT_KEY = "turn_context"


def build_model(settings: Settings) -> BaseChatModel:
    """Instantiate the chat model for the configured provider."""
    if settings.model_provider == "openai":
        return ChatOpenAI(
            model=settings.openai_model,
            api_key=settings.openai_api_key,
            timeout=settings.model_timeout_seconds,
            max_retries=settings.model_max_retries,
            streaming=True,
        )
    return ChatGoogleGenerativeAI(
        model=settings.gemini_model,
        api_key=settings.google_api_key,
        timeout=settings.model_timeout_seconds,
        max_retries=settings.model_max_retries,
    )


def get_turn_context(config: RunnableConfig) -> TurnContext:
    context = (config.get("configurable") or {}).get(TURN_CONTEXT_KEY)
    if not isinstance(context, TurnContext):
        raise RuntimeError("turn_context missing from RunnableConfig.configurable")
    return context


def create_graph(
    settings: Settings | None = None,
    *,
    model: BaseChatModel | None = None,
    tools: Sequence[BaseTool] | None = None,
):
    """Compile the model/tool loop.

    No checkpointer is attached: the transcript is written once per completed
    turn by the orchestrator, never per graph step.
    """
    resolved_settings = settings or get_settings()
    bound_tools = tuple(tools) if tools is not None else tuple(get_registered_tools())
    tools_by_name = {tool.name: tool for tool in bound_tools}

    async def call_model(state: MessagesState, config: RunnableConfig, writer: StreamWriter):
        system_message = SystemMessage(content=get_system_prompt(override=resolved_settings.system_prompt))
        messages = [system_message] + list(state["messages"])
        chat_model = model if model is not None else build_model(resolved_settings)
        model_with_tools = chat_model.bind_tools(list(bound_tools))

        gathered = None
        async for chunk in model_with_tools.astream(messages, config=config):
            text = extract_text(chunk.content)
            if text:
                writer({"type": "text", "text": text})
            gathered = chunk if gathered is None else gathered + chunk

        if gathered is None:
            logger.warning("[AGENT] Model returned an empty stream")
            return {"messages": [AIMessage(content="")]}
        response = message_chunk_to_message(gathered)
        if isinstance(response, AIMessage) and response.tool_calls:
            logger.info("[AGENT] Model requested %d tool call(s): %s",
                        len(response.tool_calls), [tc["name"] for tc in response.tool_calls])
        return {"messages": [response]}

    def call_tool(state: MessagesState, config: RunnableConfig):
        context = get_turn_context(config)
        last_message = state["messages"][-1]
        logger.info("[AGENT] call_tool: conversation=%s user=%s", context.conversation_id, context.user_id)
        # One at a time, in the order the model issued them.
        return {
            "messages": [
                execute_tool_call(tool_call, context, tools_by_name)
                for tool_call in last_message.tool_calls
            ]
        }

    def should_continue(state: MessagesState) -> Literal["tool_node", END]:
        last_message = state["messages"][-1]
        if isinstance(last_message, AIMessage) and last_message.tool_calls:
            return "tool_node"
        return END

    workflow = StateGraph(MessagesState)
    workflow.add_node("model", call_model)
    workflow.add_node("tool_node", call_tool)
    workflow.add_edge(START, "model")
    workflow.add_conditional_edges("model", should_continue, ["tool_node", END])
    workflow.add_edge("tool_node", "model")
    return workflow.compile()


@lru_cache
def get_graph():
    """Compiled graph for the process settings; it holds no per-conversation state."""
    return create_graph(get_settings())
