"""Wire Model: pydantic base that omits absent optional fields on serialization.

Invariants:
    - A field whose declared default is None and whose value is None is dropped
      from model_dump() and model_dump_json() output (never emitted as null)
    - Required fields and fields with non-None defaults are always emitted,
      even when their value is None (e.g. ToolOutput[None].output)
    - Nested None values inside payloads (args, results, history) are preserved

Design Decisions:
    - Wrap model_serializer over exclude_none: exclude_none would also strip
      nulls inside free-form JSON payloads
"""

from typing import Any

from pydantic import BaseModel, SerializerFunctionWrapHandler, model_serializer


class WireModel(BaseModel):
    """Base for every envelope and sub-structure."""

    @model_serializer(mode="wrap")
    def serialize_wire(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        for name, info in type(self).model_fields.items():
            if info.is_required() or info.default is not None:
                continue
            if getattr(self, name) is None:
                data.pop(info.serialization_alias or name, None)
        return data
