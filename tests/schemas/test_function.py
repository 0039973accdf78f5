"""Function declarations: prefixing, immutability, resource tag matching.

Tests cover:
    - name_with_prefix changes only the name and composes left-to-right
    - Declarations are frozen
    - supported_resource_tags matching and dedupe
    - validate_arguments delegates to strict validation
"""

import pytest
from pydantic import ValidationError

from agentwire.core.errors import ToolValidationError
from agentwire.schemas.function import Function, FunctionDefinition
from agentwire.schemas.resource import Resource


def _search(strict: bool | None = None) -> FunctionDefinition:
    return FunctionDefinition(
        name="search",
        description="Search the knowledge base",
        parameters={
            "type": "object",
            "properties": {"q": {"type": "string"}},
            "required": ["q"],
            "additionalProperties": False,
        },
        strict=strict,
    )


def test_name_with_prefix():
    d = _search(strict=True)
    p = d.name_with_prefix("ns_")
    assert p.name == "ns_search"
    assert p.description == d.description
    assert p.parameters == d.parameters
    assert p.strict is True
    assert d.name == "search"


def test_prefixes_compose_left_to_right():
    d = FunctionDefinition(name="x", description="", parameters={})
    assert d.name_with_prefix("a_").name_with_prefix("b_").name == "b_a_x"


def test_prefixed_copy_does_not_share_parameters():
    d = _search()
    p = d.name_with_prefix("ns_")
    assert p.parameters is not d.parameters


def test_definition_is_frozen():
    d = _search()
    with pytest.raises(ValidationError):
        d.name = "other"


def test_is_strict():
    assert _search(strict=True).is_strict
    assert not _search(strict=False).is_strict
    assert not _search().is_strict


def test_validate_arguments_strict():
    assert _search(strict=True).validate_arguments('{"q": "x"}') == {"q": "x"}
    with pytest.raises(ToolValidationError):
        _search(strict=True).validate_arguments('{"q": 1}')


def test_function_supports_resource_by_tag():
    f = Function(definition=_search(), supported_resource_tags=["md", "txt"])
    assert f.supports(Resource(tag="md", name="a.md"))
    assert not f.supports(Resource(tag="pdf", name="a.pdf"))


def test_function_select_resources_preserves_order():
    f = Function(definition=_search(), supported_resource_tags=["md"])
    r1 = Resource(tag="md", name="1")
    r2 = Resource(tag="pdf", name="2")
    r3 = Resource(tag="md", name="3")
    offered, withheld = f.select_resources([r1, r2, r3])
    assert offered == [r1, r3]
    assert withheld == [r2]
    assert f.select_resources(None) == ([], [])


def test_supported_tags_deduplicated():
    f = Function(definition=_search(), supported_resource_tags=["md", "pdf", "md"])
    assert f.supported_resource_tags == ["md", "pdf"]


def test_function_name_with_prefix():
    f = Function(definition=_search(), supported_resource_tags=["md"])
    p = f.name_with_prefix("kb_")
    assert p.name == "kb_search"
    assert p.supported_resource_tags == ["md"]
    assert f.name == "search"


def test_resource_tag_required():
    with pytest.raises(ValidationError):
        Resource(tag="", name="x")
