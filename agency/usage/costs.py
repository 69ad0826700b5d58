"""Estimated token cost per tool invocation."""

from collections.abc import Iterable

from agency.models import ToolCall

TOOL_COSTS: dict[str, int] = {
    "web_search": 2000,
    "web_fetch": 800,
    "browser": 5000,
    "read": 100,
    "write": 150,
    "edit": 200,
    "exec": 600,
    "process": 200,
    "message": 500,
    "tts": 400,
}

FALLBACK_TOOL_COST = 500


def tool_cost(tool: str) -> int:
    return TOOL_COSTS.get(tool, FALLBACK_TOOL_COST)


def tool_tokens(calls: Iterable[ToolCall]) -> int:
    """Sum of table costs for a session's tool calls."""
    return sum(tool_cost(call.tool) for call in calls)


def invocation_tokens(call: ToolCall) -> int:
    """Tokens charged to the per-tool counter: the call's own estimate when given."""
    if call.estimated_tokens is not None:
        return int(call.estimated_tokens)
    return tool_cost(call.tool)
