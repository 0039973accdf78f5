"""Completion Types: the request shape a completion provider consumes.

Invariants:
    - A completion provider returns AgentOutput; this module defines only shapes
    - Resolved tool call results are replayed verbatim as `tool` messages
    - continue_from() rebuilds history from full_history, so providers must
      store Message-shaped dicts there
"""

import json
from typing import Any, Literal, Protocol

from pydantic import Field

from agentwire.core.tokens import evaluate_tokens
from agentwire.schemas.envelopes import AgentOutput
from agentwire.schemas.function import FunctionDefinition
from agentwire.schemas.resource import Resource
from agentwire.schemas.tool_call import ToolCall
from agentwire.schemas.wire import WireModel


class Message(WireModel):
    """One conversation turn."""
    role: Literal["system", "user", "assistant", "tool"]
    content: Any
    name: str | None = None
    tool_call_id: str | None = None


def tool_result_messages(calls: list[ToolCall] | None) -> list[Message]:
    """Replay resolved tool calls as tool messages, in call order."""
    return [
        Message(
            role="tool",
            content=c.result if isinstance(c.result, str) else json.dumps(c.result),
            name=c.name,
            tool_call_id=c.id,
        )
        for c in calls or []
        if c.is_resolved
    ]


class CompletionRequest(WireModel):
    """Request to a completion provider."""
    instructions: str = ""
    prompt: str = ""
    chat_history: list[Message] = Field(default_factory=list)
    tools: list[FunctionDefinition] = Field(default_factory=list)
    tool_choice_required: bool = False
    max_output_tokens: int | None = Field(None, gt=0)
    temperature: float | None = Field(None, ge=0.0)
    stop: list[str] | None = None
    output_schema: dict[str, Any] | None = None
    resources: list[Resource] | None = None

    def estimated_input_tokens(self) -> int:
        parts = [self.instructions, self.prompt]
        for m in self.chat_history:
            parts.append(m.content if isinstance(m.content, str) else json.dumps(m.content))
        return sum(evaluate_tokens(p) for p in parts)

    def continue_from(self, output: AgentOutput) -> "CompletionRequest":
        """Next request after `output`'s tool calls were resolved."""
        history = [Message.model_validate(m) for m in output.full_history or []]
        history.extend(tool_result_messages(output.tool_calls))
        return self.model_copy(update={"prompt": "", "chat_history": history})


class CompletionFeatures(Protocol):
    """Contract for a completion provider."""

    @property
    def model_name(self) -> str: ...

    async def completion(self, req: CompletionRequest) -> AgentOutput: ...
