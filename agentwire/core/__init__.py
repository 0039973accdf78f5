"""Core Layer: pure logic shared by every envelope, no IO, no async.

Invariants:
    - No module in core/ imports from services/ or infrastructure/
    - Functions are pure and deterministic (strict_schema only logs)
"""
