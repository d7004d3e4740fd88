"""Tests for the tool registry and the tool call runner."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
from langchain_core.messages import ToolMessage
from langchain_core.tools import tool
from pydantic import BaseModel

from booking_agent.tools import get_registered_tools, get_tools_by_name
from booking_agent.tools.runner import execute_tool_call, run_tool


class EchoInput(BaseModel):
    text: str


@tool(args_schema=EchoInput)
def explode(text: str, agent_context=None) -> dict:
    """Always fails."""
    raise RuntimeError(f"boom: {text}")


class TestRegistry:
    def test_catalog(self):
        names = [t.name for t in get_registered_tools()]
        assert names == [
            "findFlights",
            "getFlightStatus",
            "selectSeats",
            "createReservation",
            "getReservation",
            "authorizePayment",
            "verifyPayment",
            "getBoardingPass",
        ]

    def test_lookup_is_read_only(self):
        registry = get_tools_by_name()
        assert registry["findFlights"].name == "findFlights"
        with pytest.raises(TypeError):
            registry["extra"] = MagicMock()

    def test_context_is_not_part_of_model_schema(self):
        for registered in get_registered_tools():
            assert "agent_context" not in registered.args

    def test_every_tool_has_description(self):
        for registered in get_registered_tools():
            assert registered.description


class TestRunTool:
    def test_success(self, turn_context):
        result = run_tool("getFlightStatus", {"flightNumber": "BA142", "date": "2025-06-01"}, turn_context)
        assert result["status"] == "success"

    def test_unknown_tool(self, turn_context):
        result = run_tool("bookHotel", {}, turn_context)
        assert result["status"] == "error"
        assert result["error"] == "ToolValidationError"
        assert "bookHotel" in result["message"]

    def test_invalid_arguments(self, turn_context):
        result = run_tool("findFlights", {"origin": "JFK"}, turn_context)
        assert result["status"] == "error"
        assert result["error"] == "ToolValidationError"
        assert "destination" in result["message"]
        assert result["retryable"] is False

    def test_domain_error(self, turn_context):
        result = run_tool("getReservation", {"reservationId": "missing"}, turn_context)
        assert result == {
            "status": "error",
            "error": "NotFound",
            "message": "Reservation missing was not found.",
            "retryable": False,
        }

    def test_unexpected_error_is_contained(self, turn_context):
        result = run_tool("explode", {"text": "hi"}, turn_context, {"explode": explode})
        assert result["status"] == "error"
        assert result["error"] == "ToolExecutionError"
        assert "boom: hi" in result["message"]


class TestExecuteToolCall:
    def test_answers_with_same_call_id(self, turn_context):
        message = execute_tool_call(
            {"id": "call-42", "name": "getFlightStatus", "args": {"flightNumber": "BA142", "date": "2025-06-01"}},
            turn_context,
        )
        assert isinstance(message, ToolMessage)
        assert message.tool_call_id == "call-42"
        assert message.status == "success"
        assert json.loads(message.content)["flightNumber"] == "BA142"

    def test_error_result_marks_message(self, turn_context):
        message = execute_tool_call({"id": "call-1", "name": "verifyPayment", "args": {}}, turn_context)
        assert message.status == "error"
        assert json.loads(message.content)["status"] == "error"
