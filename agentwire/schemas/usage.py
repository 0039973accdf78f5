"""Usage: additive token/request counters with saturating accumulation.

Invariants:
    - Every counter is an unsigned 64-bit value: 0 <= v <= U64_MAX
    - Accumulation saturates at U64_MAX, never wraps, never raises
    - Accumulation is commutative and associative; Usage() is the identity
    - No subtract or reset: callers needing per-call deltas snapshot first
"""

from collections.abc import Iterable
from typing import Annotated

from pydantic import Field

from agentwire.schemas.wire import WireModel

U64_MAX: int = 2**64 - 1

Counter = Annotated[int, Field(ge=0, le=U64_MAX)]


def saturating_add(a: int, b: int) -> int:
    return min(a + b, U64_MAX)


class Usage(WireModel):
    """Cumulative cost of one or more LLM/tool calls."""
    input_tokens: Counter = 0    # tokens sent to the LLM
    output_tokens: Counter = 0   # tokens received from the LLM
    requests: Counter = 0        # requests made to agents and tools

    @classmethod
    def bookkeeping(cls) -> "Usage":
        """Minimum cost of one tool invocation: one request, no tokens."""
        return cls(requests=1)

    @classmethod
    def total(cls, usages: Iterable["Usage"]) -> "Usage":
        result = cls()
        for usage in usages:
            result.accumulate(usage)
        return result

    def accumulate(self, other: "Usage") -> None:
        """Add `other` into self, each counter clamped at U64_MAX."""
        self.input_tokens = saturating_add(self.input_tokens, other.input_tokens)
        self.output_tokens = saturating_add(self.output_tokens, other.output_tokens)
        self.requests = saturating_add(self.requests, other.requests)

    def merged(self, other: "Usage") -> "Usage":
        result = self.model_copy()
        result.accumulate(other)
        return result

    def __add__(self, other: "Usage") -> "Usage":
        if not isinstance(other, Usage):
            return NotImplemented
        return self.merged(other)

    def is_zero(self) -> bool:
        return self.input_tokens == 0 and self.output_tokens == 0 and self.requests == 0
