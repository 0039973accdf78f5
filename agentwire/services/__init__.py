"""Services Layer: tool dispatch, usage aggregation, completion adapter.

Invariants:
    - Tool dispatch uses an explicit name -> handler mapping (no auto-discovery)
    - Tool failures are returned as the canonical error payload, never raised
"""
