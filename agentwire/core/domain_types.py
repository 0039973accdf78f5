"""Domain Types: identity types and enums shared across all envelopes.

Invariants:
    - Principal and ThreadId wrap str: never use a bare str for an identity in domain logic
    - ANONYMOUS is the single sentinel for unauthenticated or system-originated requests
    - ThreadId is an opaque foreign key into the thread store, never embedded data
    - All valid states encoded as Enums: no raw string matching

Design Decisions:
    - NewType over wrapper classes: zero runtime cost, values serialize as plain strings
    - str Enums: serialize to JSON without custom encoders
"""

import uuid
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

Principal = NewType("Principal", str)
ThreadId = NewType("ThreadId", str)

# Textual form of the anonymous principal.
ANONYMOUS: Principal = Principal("2vxsx-fae")


def is_anonymous(principal: Principal | None) -> bool:
    """True when no identity is known or the identity is the anonymous sentinel."""
    return principal is None or principal == ANONYMOUS


def new_thread_id() -> ThreadId:
    """Allocate a fresh thread id. Consumers call this when RequestMeta.thread is absent."""
    return ThreadId(uuid.uuid4().hex)


# ─── Enums ───────────────────────────────────────────────────────

class FinishReason(str, Enum):
    """Why a completion ended. Only STOP and TOOL_CALLS are normal finishes."""
    STOP = "stop"
    TOOL_CALLS = "tool_calls"
    LENGTH = "length"
    CONTENT_FILTER = "content_filter"
    ERROR = "error"


NORMAL_FINISH_REASONS = frozenset({FinishReason.STOP, FinishReason.TOOL_CALLS})


def is_normal_finish(reason: FinishReason) -> bool:
    return reason in NORMAL_FINISH_REASONS


class ToolCallState(str, Enum):
    """Per-call lifecycle: REQUESTED -> DISPATCHED -> COMPLETED | FAILED, or REQUESTED -> FAILED."""
    REQUESTED = "requested"
    DISPATCHED = "dispatched"
    COMPLETED = "completed"
    FAILED = "failed"


TOOL_CALL_TRANSITIONS: dict[ToolCallState, frozenset[ToolCallState]] = {
    # Rejection before dispatch (unknown tool, invalid arguments).
    ToolCallState.REQUESTED: frozenset({
        ToolCallState.DISPATCHED, ToolCallState.FAILED,
    }),
    ToolCallState.DISPATCHED: frozenset({
        ToolCallState.COMPLETED, ToolCallState.FAILED,
    }),
    ToolCallState.COMPLETED: frozenset(),
    ToolCallState.FAILED: frozenset(),
}


def can_transition(current: ToolCallState, target: ToolCallState) -> bool:
    return target in TOOL_CALL_TRANSITIONS[current]
