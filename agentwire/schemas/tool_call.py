"""Tool Call: one function invocation requested by an LLM and its eventual result.

Invariants:
    - result is None until execution completes; resolve() sets it exactly once
    - id is unique within its enclosing response and stable across the round trip
    - args is opaque here: shape governed by FunctionDefinition.parameters,
      decoded only on demand via parse_args()
    - state belongs to the record itself, never to a registry keyed by id:
      two responses may reuse the same id
    - state is process-local and never serialized
"""

from collections.abc import Iterable
from typing import Any

from pydantic import PrivateAttr

from agentwire.core.domain_types import ToolCallState, can_transition
from agentwire.core.errors import (
    DuplicateToolCallIdError, ErrorContext, ToolResultAlreadySetError,
)
from agentwire.core.strict_schema import decode_arguments
from agentwire.core.tool_results import is_tool_error
from agentwire.schemas.wire import WireModel


class ToolCall(WireModel):
    """Tool call returned by LLM function calling."""
    id: str
    name: str
    args: str = ""
    result: Any = None

    _state: ToolCallState = PrivateAttr(default=ToolCallState.REQUESTED)

    @property
    def state(self) -> ToolCallState:
        return self._state

    @property
    def is_resolved(self) -> bool:
        return self.result is not None

    @property
    def is_failed(self) -> bool:
        return is_tool_error(self.result)

    def advance(self, target: ToolCallState) -> None:
        """Move along the lifecycle. Raises RuntimeError on an illegal transition."""
        if not can_transition(self._state, target):
            raise RuntimeError(
                f"Illegal transition {self._state.value} -> {target.value} "
                f"for tool call '{self.id}'"
            )
        self._state = target

    def resolve(self, result: Any) -> None:
        """Record the call's result. Raises if already resolved."""
        if result is None:
            raise ValueError("None is not a tool call result; absence means unresolved")
        if self.result is not None:
            raise ToolResultAlreadySetError(
                self.id, ErrorContext(tool_name=self.name, call_id=self.id),
            )
        self.result = result

    def parse_args(self) -> dict:
        return decode_arguments(self.args)


def ensure_unique_call_ids(calls: Iterable[ToolCall]) -> None:
    seen: set[str] = set()
    for call in calls:
        if call.id in seen:
            raise DuplicateToolCallIdError(
                call.id, ErrorContext(tool_name=call.name, call_id=call.id),
            )
        seen.add(call.id)
