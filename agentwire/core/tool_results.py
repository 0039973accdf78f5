"""Tool Results: the canonical failure payload for a tool call.

Invariants:
    - A failed call's ToolCall.result / ToolOutput.output is exactly
      {"status": "error", "error_code": <CODE>, "message": <text>}
    - Absence of a result means "not yet resolved", never "failed"
    - error_code is UPPER_SNAKE and comes from the codes below or an AgentWireError.code
"""

from typing import Any

UNKNOWN_TOOL = "UNKNOWN_TOOL"
INVALID_ARGUMENTS = "INVALID_ARGUMENTS"
STRICT_SCHEMA_VIOLATION = "STRICT_SCHEMA_VIOLATION"
TOOL_EXECUTION_FAILED = "TOOL_EXECUTION_FAILED"


def tool_error(error_code: str, message: str) -> dict:
    return {"status": "error", "error_code": error_code, "message": message}


def is_tool_error(value: Any) -> bool:
    """True when value has the shape produced by tool_error()."""
    return (
        isinstance(value, dict)
        and value.get("status") == "error"
        and isinstance(value.get("error_code"), str)
    )
