"""Usage Tracker: serialized aggregation of Usage across concurrently completing calls.

Invariants:
    - One Usage instance, mutated only under the lock
    - Accumulate-only: no reset, no subtract
    - snapshot() returns an independent copy
"""

import threading

from agentwire.schemas.usage import Usage


class UsageTracker:
    """Running total of usage from every hop of a call chain."""

    def __init__(self, initial: Usage | None = None):
        self._lock = threading.Lock()
        self._total = initial.model_copy() if initial is not None else Usage()

    def record(self, usage: Usage) -> None:
        with self._lock:
            self._total.accumulate(usage)

    def snapshot(self) -> Usage:
        with self._lock:
            return self._total.model_copy()

    @property
    def total(self) -> Usage:
        return self.snapshot()
