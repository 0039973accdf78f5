"""Pydantic Schemas: the wire shape of every envelope and sub-structure.

Invariants:
    - Optional fields are omitted from the wire form when absent (never null)
    - Identity types from core/ are used for principal and thread fields
"""
