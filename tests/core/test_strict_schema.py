"""Strict Schema: subset checks and argument validation.

Tests cover:
    - A well-formed strict schema has no violations
    - Each subset rule is reported (root type, additionalProperties, required, keywords, depth)
    - Strict arguments are rejected, never coerced
    - Non-strict arguments pass through with a logged warning
    - Malformed payloads raise ToolArgumentsError
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

import pytest

from agentwire.core.errors import StrictSchemaError, ToolArgumentsError, ToolValidationError
from agentwire.core.strict_schema import (
    check_strict_parameters, decode_arguments, validate_arguments,
)


@dataclass
class _Def:
    name: str
    parameters: Any
    strict: bool | None = None


def _strict_schema() -> dict:
    return {
        "type": "object",
        "properties": {
            "query": {"type": "string"},
            "limit": {"type": ["integer", "null"]},
            "filters": {
                "type": "object",
                "properties": {"lang": {"type": "string", "enum": ["en", "pt"]}},
                "required": ["lang"],
                "additionalProperties": False,
            },
        },
        "required": ["query", "limit", "filters"],
        "additionalProperties": False,
    }


# -- check_strict_parameters ---------------------------------------------------

def test_valid_strict_schema_has_no_violations():
    assert check_strict_parameters(_strict_schema()) == []


def test_non_dict_parameters():
    assert check_strict_parameters(None) == ["parameters must be a JSON object schema"]


def test_invalid_json_schema_reported():
    violations = check_strict_parameters({"type": 12})
    assert len(violations) == 1
    assert violations[0].startswith("invalid JSON Schema")


def test_root_must_be_object():
    schema = {"type": "array", "items": {"type": "string"}}
    assert any("root schema must have type 'object'" in v for v in check_strict_parameters(schema))


def test_missing_additional_properties_false():
    schema = _strict_schema()
    del schema["properties"]["filters"]["additionalProperties"]
    violations = check_strict_parameters(schema)
    assert violations == ["$.filters: additionalProperties must be false"]


def test_every_property_must_be_required():
    schema = _strict_schema()
    schema["required"] = ["query"]
    violations = check_strict_parameters(schema)
    assert len(violations) == 1
    assert "['filters', 'limit']" in violations[0]


def test_forbidden_keyword_reported_with_path():
    schema = _strict_schema()
    schema["properties"]["query"]["not"] = {"const": ""}
    violations = check_strict_parameters(schema)
    assert violations == ["$.query: keyword 'not' is not allowed in strict mode"]


def test_root_any_of_rejected():
    schema = _strict_schema()
    schema["anyOf"] = [{"required": ["query"]}]
    assert "$: root schema must not use anyOf" in check_strict_parameters(schema)


def test_depth_limit():
    inner: dict = {"type": "string"}
    for _ in range(4):
        inner = {
            "type": "object",
            "properties": {"x": inner},
            "required": ["x"],
            "additionalProperties": False,
        }
    assert check_strict_parameters(inner, max_depth=10) == []
    violations = check_strict_parameters(inner, max_depth=2)
    assert any("nesting deeper than 2" in v for v in violations)


def test_defs_are_checked():
    schema = _strict_schema()
    schema["$defs"] = {"loose": {"type": "object", "properties": {"a": {"type": "string"}}}}
    violations = check_strict_parameters(schema)
    assert "$.$defs.loose: additionalProperties must be false" in violations


# -- decode_arguments ----------------------------------------------------------

def test_decode_empty_payload_is_empty_object():
    assert decode_arguments("") == {}
    assert decode_arguments("   ") == {}
    assert decode_arguments(None) == {}


def test_decode_rejects_malformed_json():
    with pytest.raises(ToolArgumentsError):
        decode_arguments("{not json")


def test_decode_rejects_non_object():
    with pytest.raises(ToolArgumentsError, match="list"):
        decode_arguments("[1, 2]")


# -- validate_arguments --------------------------------------------------------

def _args(**kw) -> str:
    base = {"query": "q", "limit": None, "filters": {"lang": "en"}}
    base.update(kw)
    return json.dumps(base)


def test_strict_valid_arguments_returned_decoded():
    d = _Def("search", _strict_schema(), strict=True)
    assert validate_arguments(d, _args()) == {
        "query": "q", "limit": None, "filters": {"lang": "en"},
    }


def test_strict_rejects_wrong_type_without_coercion():
    d = _Def("search", _strict_schema(), strict=True)
    with pytest.raises(ToolValidationError) as exc:
        validate_arguments(d, _args(limit="5"))
    assert exc.value.field == "$.limit"


def test_strict_rejects_extra_property():
    d = _Def("search", _strict_schema(), strict=True)
    with pytest.raises(ToolValidationError):
        validate_arguments(d, _args(extra=True))


def test_strict_rejects_non_conforming_schema_before_arguments():
    schema = _strict_schema()
    schema["required"] = ["query"]
    d = _Def("search", schema, strict=True)
    with pytest.raises(StrictSchemaError):
        validate_arguments(d, _args())


def test_non_strict_mismatch_logs_and_passes(caplog):
    d = _Def("search", _strict_schema(), strict=None)
    with caplog.at_level(logging.WARNING, logger="agentwire.core.strict_schema"):
        result = validate_arguments(d, _args(limit="5"))
    assert result["limit"] == "5"
    assert "do not match schema" in caplog.text


def test_non_strict_invalid_schema_skips_validation(caplog):
    d = _Def("search", {"type": 12}, strict=False)
    with caplog.at_level(logging.WARNING, logger="agentwire.core.strict_schema"):
        assert validate_arguments(d, '{"a": 1}') == {"a": 1}
    assert "invalid schema" in caplog.text


def test_non_strict_still_rejects_malformed_json():
    d = _Def("search", {}, strict=False)
    with pytest.raises(ToolArgumentsError):
        validate_arguments(d, "{")
