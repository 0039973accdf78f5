"""Envelopes: agent and tool request/response pairs.

Invariants:
    - Constructors set required fields and leave optional fields absent
    - AgentInput.name == "" selects the default agent (valid sentinel, not an error)
    - failed_reason is absent on a normal finish (stop / tool_calls); present
      means the completion terminated abnormally
    - Tool call ids are unique within one AgentOutput
    - full_history is for direct callers of the completion layer only:
      an engine returns for_caller() to its own callers
    - Produced resources are appended, never replace input resources
    - ToolOutput.usage is mandatory; the dispatcher floors it at one request

Design Decisions:
    - pydantic generics for ToolInput[T] / ToolOutput[T]: per-tool payload
      types validated on construction
"""

from typing import Any, Generic, TypeVar

from pydantic import Field, field_validator

from agentwire.core.domain_types import FinishReason, ThreadId, is_normal_finish
from agentwire.core.errors import DuplicateToolCallIdError
from agentwire.core.tool_results import is_tool_error, tool_error
from agentwire.schemas.meta import RequestMeta
from agentwire.schemas.resource import Resource, merge_resources
from agentwire.schemas.tool_call import ToolCall, ensure_unique_call_ids
from agentwire.schemas.usage import Usage
from agentwire.schemas.wire import WireModel

T = TypeVar("T")

DEFAULT_AGENT = ""


def _own_usage(usage: Usage | None) -> Usage:
    """Copy of the caller's ledger, so later accumulation stays local."""
    return usage.model_copy() if usage is not None else Usage()


# ─── Agent ───────────────────────────────────────────────────────

class AgentInput(WireModel):
    """Request to an agent."""
    name: str
    prompt: str
    resources: list[Resource] | None = None
    meta: RequestMeta | None = None

    @classmethod
    def new(cls, name: str, prompt: str) -> "AgentInput":
        return cls(name=name, prompt=prompt)

    @property
    def uses_default_agent(self) -> bool:
        return self.name == DEFAULT_AGENT

    @property
    def thread(self) -> ThreadId | None:
        return self.meta.thread if self.meta else None


class AgentOutput(WireModel):
    """Output of an agent execution."""
    content: str = ""
    usage: Usage = Field(default_factory=Usage)
    thread: ThreadId | None = None
    failed_reason: str | None = None
    tool_calls: list[ToolCall] | None = None
    full_history: list[Any] | None = None
    resources: list[Resource] | None = None

    @field_validator("tool_calls")
    @classmethod
    def check_unique_call_ids(cls, v: list[ToolCall] | None) -> list[ToolCall] | None:
        if v:
            try:
                ensure_unique_call_ids(v)
            except DuplicateToolCallIdError as e:
                raise ValueError(e.message) from e
        return v

    @classmethod
    def failed(cls, reason: str, usage: Usage | None = None) -> "AgentOutput":
        return cls(failed_reason=reason, usage=_own_usage(usage))

    @classmethod
    def from_finish(
        cls,
        content: str,
        finish_reason: FinishReason,
        *,
        detail: str | None = None,
        usage: Usage | None = None,
        tool_calls: list[ToolCall] | None = None,
        thread: ThreadId | None = None,
        full_history: list[Any] | None = None,
    ) -> "AgentOutput":
        """Build an output, setting failed_reason only for abnormal finishes."""
        failed_reason = None
        if not is_normal_finish(finish_reason):
            failed_reason = detail or f"completion finished abnormally: {finish_reason.value}"
        return cls(
            content=content,
            usage=_own_usage(usage),
            thread=thread,
            failed_reason=failed_reason,
            tool_calls=tool_calls or None,
            full_history=full_history,
        )

    @property
    def is_failed(self) -> bool:
        return self.failed_reason is not None

    @property
    def is_normal_completion(self) -> bool:
        return self.failed_reason is None

    def pending_tool_calls(self) -> list[ToolCall]:
        return [c for c in self.tool_calls or [] if not c.is_resolved]

    def add_resources(self, produced: list[Resource] | None) -> None:
        self.resources = merge_resources(self.resources, produced)

    def for_caller(self) -> "AgentOutput":
        """Copy safe to return from an engine: full_history removed."""
        return self.model_copy(update={"full_history": None}, deep=True)


# ─── Tool ────────────────────────────────────────────────────────

class ToolInput(WireModel, Generic[T]):
    """Request to a tool, generic over its argument type."""
    name: str
    args: T
    resources: list[Resource] | None = None
    meta: RequestMeta | None = None

    @classmethod
    def new(cls, name: str, args: T) -> "ToolInput[T]":
        return cls(name=name, args=args)

    @property
    def thread(self) -> ThreadId | None:
        return self.meta.thread if self.meta else None


class ToolOutput(WireModel, Generic[T]):
    """Output of a tool execution, generic over its result type."""
    output: T
    resources: list[Resource] | None = None
    usage: Usage = Field(default_factory=Usage)

    @classmethod
    def new(cls, output: T) -> "ToolOutput[T]":
        return cls(output=output)

    @classmethod
    def failed(cls, error_code: str, message: str) -> "ToolOutput[dict]":
        return cls(output=tool_error(error_code, message), usage=Usage.bookkeeping())

    @property
    def is_failed(self) -> bool:
        return is_tool_error(self.output)

    def with_usage(self, usage: Usage) -> "ToolOutput[T]":
        """Copy carrying `usage`, floored at one bookkeeping request."""
        floored = usage.model_copy(update={"requests": max(usage.requests, 1)})
        return self.model_copy(update={"usage": floored})
