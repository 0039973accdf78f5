"""Function Declarations: a tool's callable contract and its resource compatibility.

Invariants:
    - name_with_prefix returns a NEW declaration; only `name` changes
    - Prefixes compose left-to-right: "a_" then "b_" on "x" gives "b_a_x"
    - strict=True means arguments must validate fully against `parameters`;
      enforcement lives in core/strict_schema.py, applied by the dispatcher
    - supported_resource_tags is a list on the wire, matched as a set
"""

from collections.abc import Iterable
from typing import Any

from pydantic import ConfigDict, Field, field_validator

from agentwire.core.strict_schema import MAX_STRICT_DEPTH, validate_arguments
from agentwire.schemas.resource import Resource, select_resources
from agentwire.schemas.wire import WireModel


class FunctionDefinition(WireModel):
    """A callable function with its metadata and JSON schema."""
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    parameters: dict[str, Any]
    strict: bool | None = None

    @property
    def is_strict(self) -> bool:
        return self.strict is True

    def name_with_prefix(self, prefix: str) -> "FunctionDefinition":
        return self.model_copy(update={"name": f"{prefix}{self.name}"}, deep=True)

    def validate_arguments(
        self, args: str | dict | None, max_depth: int = MAX_STRICT_DEPTH,
    ) -> dict:
        return validate_arguments(self, args, max_depth)


class Function(WireModel):
    """A tool's full declaration plus the resource tags it accepts."""
    model_config = ConfigDict(frozen=True)

    definition: FunctionDefinition
    supported_resource_tags: list[str] = Field(default_factory=list)

    @field_validator("supported_resource_tags")
    @classmethod
    def dedupe_tags(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(v))

    @property
    def name(self) -> str:
        return self.definition.name

    def supports(self, resource: Resource) -> bool:
        return resource.tag in self.supported_resource_tags

    def select_resources(
        self, resources: Iterable[Resource] | None,
    ) -> tuple[list[Resource], list[Resource]]:
        """Split into (offerable to this tool, withheld)."""
        return select_resources(resources, self.supported_resource_tags)

    def name_with_prefix(self, prefix: str) -> "Function":
        return self.model_copy(
            update={"definition": self.definition.name_with_prefix(prefix)},
        )
