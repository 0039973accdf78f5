"""Tool Dispatch: explicit routing from ToolCall records to tool handlers.

Invariants:
    - Every tool -> handler mapping is registered explicitly (no auto-discovery)
    - Unknown tools, rejected arguments and handler failures (exceptions or a
      return value that is not a ToolOutput) resolve the call with the
      canonical error payload (never raise)
    - Argument rejection (strict or malformed) happens before any handler runs
    - A tool only receives resources whose tag it supports
    - Every ToolOutput leaves here with usage.requests >= 1
    - Per call: REQUESTED -> DISPATCHED -> COMPLETED | FAILED;
      pre-dispatch rejection goes REQUESTED -> FAILED
    - The dispatcher holds no per-call state: lifecycle lives on each ToolCall,
      so outputs reusing the same call ids can share one dispatcher

Design Decisions:
    - Handlers are async callables taking ToolInput[dict] and returning ToolOutput
    - execute_all runs calls concurrently; usage merged through one UsageTracker
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from agentwire.config import Settings, get_settings
from agentwire.core.domain_types import ToolCallState
from agentwire.core.errors import (
    AgentWireError, DuplicateToolError, ErrorContext, StrictSchemaError,
    ToolArgumentsError, ToolResultAlreadySetError, ToolValidationError,
    UnknownToolError,
)
from agentwire.core.strict_schema import MAX_STRICT_DEPTH
from agentwire.core.tool_results import TOOL_EXECUTION_FAILED, tool_error
from agentwire.schemas.envelopes import AgentOutput, ToolInput, ToolOutput
from agentwire.schemas.function import Function, FunctionDefinition
from agentwire.schemas.meta import RequestMeta
from agentwire.schemas.resource import Resource, merge_resources
from agentwire.schemas.tool_call import ToolCall
from agentwire.schemas.usage import Usage
from agentwire.services.usage_tracker import UsageTracker

logger = logging.getLogger(__name__)

ToolHandler = Callable[[ToolInput[dict]], Awaitable[ToolOutput[Any]]]


@dataclass(frozen=True)
class RegisteredTool:
    function: Function
    handler: ToolHandler


class ToolDispatch:
    """Routes tool calls to registered handlers."""

    def __init__(self, max_strict_depth: int = MAX_STRICT_DEPTH):
        self._tools: dict[str, RegisteredTool] = {}
        self._max_strict_depth = max_strict_depth

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ToolDispatch":
        settings = settings or get_settings()
        return cls(max_strict_depth=settings.strict_max_depth)

    # -- Registry --------------------------------------------------------------

    def register(
        self, function: Function, handler: ToolHandler, prefix: str = "",
    ) -> Function:
        """Register a tool under its (optionally prefixed) name. Returns the exposed Function."""
        if prefix:
            function = function.name_with_prefix(prefix)
        if function.name in self._tools:
            raise DuplicateToolError(function.name)
        self._tools[function.name] = RegisteredTool(function, handler)
        return function

    def get(self, name: str) -> Function | None:
        tool = self._tools.get(name)
        return tool.function if tool else None

    def functions(self) -> list[Function]:
        return [t.function for t in self._tools.values()]

    def definitions(self) -> list[FunctionDefinition]:
        """Declarations to offer a completion provider."""
        return [t.function.definition for t in self._tools.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    # -- Execution -------------------------------------------------------------

    async def execute(
        self,
        call: ToolCall,
        meta: RequestMeta | None = None,
        resources: list[Resource] | None = None,
    ) -> ToolOutput:
        """Run one tool call and resolve it. Returns the tool's output."""
        if call.is_resolved or call.state is not ToolCallState.REQUESTED:
            raise ToolResultAlreadySetError(
                call.id, ErrorContext(tool_name=call.name, call_id=call.id),
            )

        tool = self._tools.get(call.name)
        if tool is None:
            return self._reject(call, UnknownToolError(call.name), meta)
        try:
            args = tool.function.definition.validate_arguments(
                call.args, self._max_strict_depth,
            )
        except (ToolArgumentsError, ToolValidationError, StrictSchemaError) as e:
            return self._reject(call, e, meta)

        offered, withheld = tool.function.select_resources(resources)
        if withheld:
            logger.info(
                f"Withholding {len(withheld)} unsupported resource(s)",
                extra=_log_extra(call, meta),
            )
        tool_input = ToolInput[dict](
            name=call.name, args=args, resources=offered or None, meta=meta,
        )

        call.advance(ToolCallState.DISPATCHED)
        output = await self._run_handler(tool.handler, tool_input, call, meta)

        output = output.with_usage(output.usage)
        call.resolve(
            output.output if output.output is not None
            else tool_error(TOOL_EXECUTION_FAILED, "Tool returned no output."),
        )
        call.advance(
            ToolCallState.FAILED if call.is_failed else ToolCallState.COMPLETED,
        )
        self._log_tool_call(call, output.usage, meta)
        return output

    async def execute_all(
        self,
        output: AgentOutput,
        meta: RequestMeta | None = None,
        resources: list[Resource] | None = None,
    ) -> AgentOutput:
        """Run every unresolved tool call of `output` concurrently.

        Returns a copy of `output` whose usage includes every tool's usage and
        whose resources include every produced resource. The ToolCall records
        are resolved in place.
        """
        pending = output.pending_tool_calls()
        tracker = UsageTracker(output.usage)

        async def _run(call: ToolCall) -> ToolOutput:
            result = await self.execute(call, meta, resources)
            tracker.record(result.usage)
            return result

        results = await asyncio.gather(*(_run(c) for c in pending))
        produced = [r for result in results for r in result.resources or []]
        return output.model_copy(update={
            "usage": tracker.snapshot(),
            "resources": merge_resources(output.resources, produced),
        })

    # -- Internals -------------------------------------------------------------

    async def _run_handler(
        self,
        handler: ToolHandler,
        tool_input: ToolInput[dict],
        call: ToolCall,
        meta: RequestMeta | None,
    ) -> ToolOutput:
        """Await the handler; every failure mode comes back as an error ToolOutput."""
        try:
            output = await handler(tool_input)
        except AgentWireError as e:
            return ToolOutput(output=e.to_tool_result())
        except Exception as e:
            logger.error(
                f"Tool '{call.name}' raised: {e}", exc_info=True,
                extra=_log_extra(call, meta),
            )
            return ToolOutput(output=tool_error(TOOL_EXECUTION_FAILED, str(e)))

        if not isinstance(output, ToolOutput):
            logger.error(
                f"Tool '{call.name}' returned {type(output).__name__}, not ToolOutput",
                extra=_log_extra(call, meta),
            )
            return ToolOutput(output=tool_error(
                TOOL_EXECUTION_FAILED,
                f"Tool returned {type(output).__name__} instead of ToolOutput.",
            ))
        return output

    def _reject(
        self, call: ToolCall, error: AgentWireError, meta: RequestMeta | None,
    ) -> ToolOutput:
        """Resolve `call` with the error payload without dispatching it."""
        payload = error.to_tool_result()
        call.resolve(payload)
        call.advance(ToolCallState.FAILED)
        logger.warning(
            f"Tool call rejected: {error.message}",
            extra={**_log_extra(call, meta), "error_code": error.code},
        )
        return ToolOutput(output=payload, usage=Usage.bookkeeping())

    def _log_tool_call(
        self, call: ToolCall, usage: Usage, meta: RequestMeta | None,
    ) -> None:
        extra = {
            **_log_extra(call, meta),
            "input_tokens": usage.input_tokens,
            "output_tokens": usage.output_tokens,
            "requests": usage.requests,
        }
        if call.is_failed:
            extra["error_code"] = call.result.get("error_code")
            logger.warning("Tool call failed", extra=extra)
        else:
            logger.info("Tool call completed", extra=extra)


def _log_extra(call: ToolCall, meta: RequestMeta | None) -> dict:
    extra = {"tool_name": call.name, "call_id": call.id}
    if meta is not None and meta.thread is not None:
        extra["thread"] = meta.thread
    return extra
