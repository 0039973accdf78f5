"""Resource: handle to an attachment owned by the external resource store.

Invariants:
    - tag is always present; tools are offered a resource only when they support its tag
    - Envelopes own their resource lists; the referenced content belongs to the store
    - Produced resources are appended to existing ones, never replace them
"""

from collections.abc import Iterable
from typing import Any

from pydantic import ConfigDict, Field

from agentwire.schemas.wire import WireModel


class Resource(WireModel):
    """Reference to a document, file, or generated artifact."""
    model_config = ConfigDict(frozen=True)

    tag: str = Field(min_length=1)
    name: str
    description: str | None = None
    uri: str | None = None
    mime_type: str | None = None
    blob: str | None = None  # base64
    size: int | None = Field(None, ge=0)
    hash: str | None = None
    metadata: dict[str, Any] | None = None


def select_resources(
    resources: Iterable[Resource] | None, tags: Iterable[str],
) -> tuple[list[Resource], list[Resource]]:
    """Partition into (matching tag, rest), preserving order."""
    wanted = set(tags)
    matched: list[Resource] = []
    rest: list[Resource] = []
    for r in resources or []:
        (matched if r.tag in wanted else rest).append(r)
    return matched, rest


def merge_resources(
    existing: list[Resource] | None, produced: Iterable[Resource] | None,
) -> list[Resource] | None:
    """Append produced to existing. None when both are empty."""
    merged = list(existing or [])
    merged.extend(produced or [])
    return merged or None
