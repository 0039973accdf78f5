"""Anthropic Completion Adapter: CompletionRequest -> Messages API -> AgentOutput.

Invariants:
    - end_turn / stop_sequence / tool_use are normal finishes: failed_reason absent
    - max_tokens, refusal and any other stop_reason set failed_reason
    - tool_use blocks become ToolCall records with JSON-encoded args, ids preserved
    - Usage counts input (incl. cache creation + cache read), output, and one request
    - full_history holds Message-shaped dicts: the sent conversation plus the assistant turn
    - `tool` messages are sent as tool_result blocks inside a user turn

Design Decisions:
    - Transport errors raise CompletionProviderError (via ResilientAnthropicClient);
      only abnormal *finishes* are structural
"""

import json
import logging
from typing import Any

from agentwire.config import Settings, get_settings
from agentwire.core.domain_types import FinishReason
from agentwire.core.errors import ErrorContext
from agentwire.infrastructure.anthropic_client import ResilientAnthropicClient
from agentwire.schemas.completion import CompletionRequest, Message
from agentwire.schemas.envelopes import AgentOutput
from agentwire.schemas.function import FunctionDefinition
from agentwire.schemas.tool_call import ToolCall
from agentwire.schemas.usage import Usage

logger = logging.getLogger(__name__)

_STOP_REASONS = {
    "end_turn": FinishReason.STOP,
    "stop_sequence": FinishReason.STOP,
    "tool_use": FinishReason.TOOL_CALLS,
    "max_tokens": FinishReason.LENGTH,
    "refusal": FinishReason.CONTENT_FILTER,
}


# -- Request building ----------------------------------------------------------

def function_to_tool(definition: FunctionDefinition) -> dict:
    return {
        "name": definition.name,
        "description": definition.description,
        "input_schema": definition.parameters,
    }


def to_anthropic_messages(req: CompletionRequest) -> tuple[str, list[dict]]:
    """Split a request into (system prompt, messages)."""
    system_parts = [req.instructions] if req.instructions else []
    messages: list[dict] = []
    for m in req.chat_history:
        if m.role == "system":
            system_parts.append(str(m.content))
        elif m.role == "tool":
            _append_tool_result(messages, m)
        else:
            messages.append({"role": m.role, "content": m.content})
    if req.prompt:
        messages.append({"role": "user", "content": req.prompt})
    return "\n\n".join(system_parts), messages


def _append_tool_result(messages: list[dict], m: Message) -> None:
    block = {
        "type": "tool_result",
        "tool_use_id": m.tool_call_id,
        "content": m.content if isinstance(m.content, str) else json.dumps(m.content),
    }
    last = messages[-1] if messages else None
    if last and last["role"] == "user" and isinstance(last["content"], list):
        last["content"].append(block)
    else:
        messages.append({"role": "user", "content": [block]})


# -- Response mapping ----------------------------------------------------------

def usage_from_message(response: Any) -> Usage:
    usage = response.usage
    cache_create = getattr(usage, "cache_creation_input_tokens", 0) or 0
    cache_read = getattr(usage, "cache_read_input_tokens", 0) or 0
    return Usage(
        input_tokens=usage.input_tokens + cache_create + cache_read,
        output_tokens=usage.output_tokens,
        requests=1,
    )


def serialize_content(response: Any) -> list[dict]:
    return [b.model_dump(exclude_none=True) for b in response.content]


def output_from_message(
    response: Any, sent: list[dict] | None = None,
) -> AgentOutput:
    """Map an Anthropic Message onto AgentOutput."""
    texts: list[str] = []
    calls: list[ToolCall] = []
    for block in response.content:
        btype = getattr(block, "type", None)
        if btype == "text":
            texts.append(block.text)
        elif btype == "tool_use":
            calls.append(ToolCall(
                id=block.id, name=block.name, args=json.dumps(block.input),
            ))

    stop_reason = response.stop_reason
    finish = _STOP_REASONS.get(stop_reason, FinishReason.ERROR)
    history = list(sent or [])
    history.append(
        Message(role="assistant", content=serialize_content(response)).model_dump()
    )
    return AgentOutput.from_finish(
        "".join(texts),
        finish,
        detail=f"completion stopped with stop_reason={stop_reason}",
        usage=usage_from_message(response),
        tool_calls=calls,
        full_history=history,
    )


# -- Provider ------------------------------------------------------------------

class AnthropicCompletion:
    """CompletionFeatures implementation backed by the Anthropic Messages API."""

    def __init__(
        self, client: ResilientAnthropicClient, model: str, max_tokens: int = 4096,
    ):
        self._client = client
        self._model = model
        self._max_tokens = max_tokens

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "AnthropicCompletion":
        settings = settings or get_settings()
        client = ResilientAnthropicClient(
            api_key=settings.anthropic_api_key,
            max_retries=settings.anthropic_max_retries,
            base_delay_ms=settings.anthropic_base_delay_ms,
            max_delay_ms=settings.anthropic_max_delay_ms,
            timeout_seconds=settings.anthropic_timeout_seconds,
        )
        return cls(client, settings.completion_model, settings.completion_max_tokens)

    @property
    def model_name(self) -> str:
        return self._model

    async def completion(self, req: CompletionRequest) -> AgentOutput:
        system, messages = to_anthropic_messages(req)
        params: dict[str, Any] = {
            "model": self._model,
            "max_tokens": req.max_output_tokens or self._max_tokens,
            "messages": messages,
        }
        if system:
            params["system"] = system
        if req.tools:
            params["tools"] = [function_to_tool(d) for d in req.tools]
            if req.tool_choice_required:
                params["tool_choice"] = {"type": "any"}
        if req.temperature is not None:
            params["temperature"] = req.temperature
        if req.stop:
            params["stop_sequences"] = req.stop

        response = await self._client.create_message(
            context=ErrorContext(debug_info={"model": self._model}), **params,
        )
        sent = [
            Message(role=m["role"], content=m["content"]).model_dump()
            for m in messages
        ]
        output = output_from_message(response, sent)
        if output.is_failed:
            logger.warning(
                output.failed_reason,
                extra={
                    "model": self._model,
                    "input_tokens": output.usage.input_tokens,
                    "output_tokens": output.usage.output_tokens,
                },
            )
        return output
