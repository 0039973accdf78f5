"""Error Hierarchy: typed, categorized exceptions for the dispatch and validation layer.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Envelopes never carry exceptions: agent failure is `failed_reason`,
      tool failure is the canonical payload built by to_tool_result()
    - Exceptions are raised only by validation, dispatch registration,
      the completion transport, and misuse of the single-mutation points

Design Decisions:
    - Single hierarchy with AgentWireError base: callers can catch one type
    - ErrorContext as dataclass: observability fields without coupling to logging
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from agentwire.core.tool_results import tool_error


class ErrorSeverity(str, Enum):
    """Error severity for observability and caller handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    EXTERNAL_API = "external_api"
    CONFLICT = "conflict"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Context attached to an error for debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    tool_name: str | None = None
    call_id: str | None = None
    thread: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class AgentWireError(Exception):
    """Base exception for all agentwire errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    def to_dict(self) -> dict:
        """Structured form for logs and error reports."""
        return {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
            "context": {
                "tool_name": self.context.tool_name,
                "call_id": self.context.call_id,
                "thread": self.context.thread,
                "retry_after_ms": self.context.retry_after_ms,
            },
        }

    def to_tool_result(self) -> dict:
        """Canonical tool failure payload (see core/tool_results.py)."""
        return tool_error(self.code, self.message)


# ─── Validation Errors ──────────────────────────────────────────

class ToolArgumentsError(AgentWireError):
    """Raw argument payload is not a decodable JSON object."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_ARGUMENTS", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )


class ToolValidationError(AgentWireError):
    """Arguments do not conform to the function's parameter schema."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_ARGUMENTS", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )
        self.field = field


class StrictSchemaError(AgentWireError):
    """A strict function declares parameters outside the strict-mode subset."""
    def __init__(
        self, function_name: str, violations: list[str],
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Function '{function_name}' is not strict-compatible: "
            + "; ".join(violations),
            "STRICT_SCHEMA_VIOLATION", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )
        self.violations = violations


# ─── Dispatch Errors ────────────────────────────────────────────

class UnknownToolError(AgentWireError):
    """No tool is registered under the requested name."""
    def __init__(self, tool_name: str, context: ErrorContext | None = None):
        super().__init__(
            f"Tool '{tool_name}' does not exist.",
            "UNKNOWN_TOOL", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context,
        )
        self.tool_name = tool_name


class DuplicateToolError(AgentWireError):
    """Two tools registered under the same (prefixed) name."""
    def __init__(self, tool_name: str, context: ErrorContext | None = None):
        super().__init__(
            f"Tool '{tool_name}' is already registered.",
            "DUPLICATE_TOOL", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context,
        )
        self.tool_name = tool_name


class DuplicateToolCallIdError(AgentWireError):
    """Two tool calls in one response share an id."""
    def __init__(self, call_id: str, context: ErrorContext | None = None):
        super().__init__(
            f"Tool call id '{call_id}' is not unique within the response.",
            "DUPLICATE_TOOL_CALL_ID", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context,
        )
        self.call_id = call_id


class ToolResultAlreadySetError(AgentWireError):
    """ToolCall.result is set-once."""
    def __init__(self, call_id: str, context: ErrorContext | None = None):
        super().__init__(
            f"Tool call '{call_id}' already has a result.",
            "TOOL_RESULT_ALREADY_SET", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context,
        )
        self.call_id = call_id


# ─── Infrastructure Errors ──────────────────────────────────────

class CompletionProviderError(AgentWireError):
    """Completion provider call failed."""
    def __init__(
        self,
        message: str,
        api_error_type: str,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            f"Completion provider error ({api_error_type}): {message}",
            "COMPLETION_PROVIDER_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx,
        )
        self.api_error_type = api_error_type
