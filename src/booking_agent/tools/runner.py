"""Validate and execute model-issued tool calls.

Every call produces exactly one result payload. Schema mismatches and handler
failures come back as error payloads so the model can recover in conversation;
nothing raised by a tool crosses into the orchestration loop.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from langchain_core.messages import ToolMessage
from langchain_core.tools import BaseTool
from pydantic import BaseModel, ValidationError

from ..context import TurnContext
from ..errors import ToolExecutionError, ToolValidationError
from . import get_tools_by_name

logger = logging.getLogger(__name__)


def _format_validation_error(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "arguments"
        problems.append(f"{location}: {error.get('msg')}")
    return "; ".join(problems)


def validate_tool_args(tool: BaseTool, args: Mapping[str, Any] | None) -> dict[str, Any]:
    """Validate raw arguments against the tool's schema and return handler kwargs."""
    schema = tool.args_schema
    if not (isinstance(schema, type) and issubclass(schema, BaseModel)):
        raise ToolValidationError(tool.name, f"Tool '{tool.name}' has no argument schema.")
    try:
        validated = schema.model_validate(dict(args or {}))
    except ValidationError as exc:
        raise ToolValidationError(tool.name, _format_validation_error(exc)) from exc
    return {name: getattr(validated, name) for name in type(validated).model_fields}


def error_payload(exc: ToolValidationError | ToolExecutionError) -> dict[str, Any]:
    return {
        "status": "error",
        "error": type(exc).__name__,
        "message": str(exc),
        "retryable": exc.retryable,
    }


def run_tool(
    name: str,
    args: Mapping[str, Any] | None,
    context: TurnContext,
    tools_by_name: Mapping[str, BaseTool] | None = None,
) -> dict[str, Any]:
    """Run one tool call and return its result payload."""
    registry = tools_by_name if tools_by_name is not None else get_tools_by_name()
    tool = registry.get(name)
    if tool is None:
        logger.warning("[TOOLS] Tool not found: %s", name)
        return error_payload(ToolValidationError(name, f"Requested tool '{name}' is not available."))

    try:
        kwargs = validate_tool_args(tool, args)
    except ToolValidationError as exc:
        logger.info("[TOOLS] Rejected arguments for %s: %s", name, exc)
        return error_payload(exc)

    func = getattr(tool, "func", None)
    if func is None:
        return error_payload(ToolValidationError(name, f"Tool '{name}' cannot be executed."))

    try:
        result = func(**kwargs, agent_context=context)
    except ToolExecutionError as exc:
        logger.info("[TOOLS] %s failed: %s", name, exc)
        return error_payload(exc)
    except Exception as exc:
        logger.exception("[TOOLS] Tool execution failed: %s", name)
        return error_payload(ToolExecutionError(f"Tool '{name}' failed: {exc}"))

    if not isinstance(result, dict):
        result = {"status": "success", "result": result}
    return result


def execute_tool_call(
    tool_call: Mapping[str, Any],
    context: TurnContext,
    tools_by_name: Mapping[str, BaseTool] | None = None,
) -> ToolMessage:
    """Answer a tool call with a ToolMessage carrying the same call id."""
    name = tool_call["name"]
    logger.info("[TOOLS] Executing tool: %s args=%s", name, str(tool_call.get("args"))[:500])
    payload = run_tool(name, tool_call.get("args"), context, tools_by_name)
    content = json.dumps(payload, ensure_ascii=False, default=str)
    logger.info("[TOOLS] Tool result: %s", content[:500])
    return ToolMessage(
        content=content,
        tool_call_id=tool_call["id"],
        name=name,
        status="error" if payload.get("status") == "error" else "success",
    )
