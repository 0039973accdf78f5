"""Strict Schema: constrained JSON Schema subset and argument validation for function calls.

Invariants:
    - check_strict_parameters is PURE: returns a list of violations, never raises
    - validate_arguments on a strict function rejects (raises), it never coerces
    - validate_arguments on a non-strict function only logs schema mismatches
    - Rejection always happens before a tool handler runs (callers rely on this)

Design Decisions:
    - jsonschema Draft 2020-12 validator for both meta-schema checks and instance validation
    - FunctionLike Protocol keeps core/ free of schema-layer imports
"""

import json
import logging
from typing import Any, Protocol

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError, best_match

from agentwire.core.errors import StrictSchemaError, ToolArgumentsError, ToolValidationError

logger = logging.getLogger(__name__)

MAX_STRICT_DEPTH: int = 10

# Keywords outside the strict-mode subset.
FORBIDDEN_STRICT_KEYWORDS = frozenset({
    "allOf", "not", "if", "then", "else",
    "dependentRequired", "dependentSchemas",
    "patternProperties", "unevaluatedProperties", "propertyNames",
    "minProperties", "maxProperties",
    "contains", "minContains", "maxContains", "uniqueItems",
})


class FunctionLike(Protocol):
    """Structural contract for a function declaration."""
    name: str
    parameters: Any
    strict: bool | None


# ─── Strict subset ───────────────────────────────────────────────

def check_strict_parameters(
    parameters: Any, max_depth: int = MAX_STRICT_DEPTH,
) -> list[str]:
    """Return every way `parameters` falls outside the strict-mode subset."""
    if not isinstance(parameters, dict):
        return ["parameters must be a JSON object schema"]
    try:
        Draft202012Validator.check_schema(parameters)
    except SchemaError as e:
        return [f"invalid JSON Schema: {e.message}"]

    violations: list[str] = []
    if parameters.get("type") != "object":
        violations.append("$: root schema must have type 'object'")
    if "anyOf" in parameters:
        violations.append("$: root schema must not use anyOf")
    _walk(parameters, "$", 0, max_depth, violations)
    return violations


def _is_object_schema(schema: dict) -> bool:
    t = schema.get("type")
    if isinstance(t, list):
        return "object" in t
    return t == "object" or "properties" in schema


def _walk(
    schema: Any, path: str, depth: int, max_depth: int, violations: list[str],
) -> None:
    if not isinstance(schema, dict):
        return
    if depth > max_depth:
        violations.append(f"{path}: nesting deeper than {max_depth} levels")
        return

    for keyword in sorted(FORBIDDEN_STRICT_KEYWORDS & schema.keys()):
        violations.append(f"{path}: keyword '{keyword}' is not allowed in strict mode")

    if _is_object_schema(schema):
        _check_object(schema, path, violations)

    for name, sub in (schema.get("properties") or {}).items():
        _walk(sub, f"{path}.{name}", depth + 1, max_depth, violations)
    if isinstance(schema.get("items"), dict):
        _walk(schema["items"], f"{path}[]", depth + 1, max_depth, violations)
    for i, sub in enumerate(schema.get("prefixItems") or []):
        _walk(sub, f"{path}[{i}]", depth + 1, max_depth, violations)
    for i, sub in enumerate(schema.get("anyOf") or []):
        _walk(sub, f"{path}.anyOf[{i}]", depth + 1, max_depth, violations)
    for key in ("$defs", "definitions"):
        for name, sub in (schema.get(key) or {}).items():
            _walk(sub, f"{path}.{key}.{name}", depth, max_depth, violations)


def _check_object(schema: dict, path: str, violations: list[str]) -> None:
    if schema.get("additionalProperties") is not False:
        violations.append(f"{path}: additionalProperties must be false")
    properties = set((schema.get("properties") or {}).keys())
    required = set(schema.get("required") or [])
    missing = sorted(properties - required)
    if missing:
        violations.append(
            f"{path}: every property must be required, missing {missing}"
        )


# ─── Argument validation ─────────────────────────────────────────

def decode_arguments(args: str | dict | None) -> dict:
    """Decode a raw argument payload. Empty payload means no arguments."""
    if args is None or (isinstance(args, str) and not args.strip()):
        return {}
    if isinstance(args, dict):
        return args
    try:
        value = json.loads(args)
    except json.JSONDecodeError as e:
        raise ToolArgumentsError(f"Arguments are not valid JSON: {e.msg}")
    if not isinstance(value, dict):
        raise ToolArgumentsError(
            f"Arguments must be a JSON object, got {type(value).__name__}"
        )
    return value


def validate_arguments(
    definition: FunctionLike,
    args: str | dict | None,
    max_depth: int = MAX_STRICT_DEPTH,
) -> dict:
    """Decode and validate arguments for `definition`. Returns the decoded dict.

    Strict: parameters must be strict-compatible and arguments must validate
    fully, otherwise StrictSchemaError / ToolValidationError is raised.
    Non-strict: mismatches are logged and the decoded arguments returned.
    """
    decoded = decode_arguments(args)

    if definition.strict is True:
        violations = check_strict_parameters(definition.parameters, max_depth)
        if violations:
            raise StrictSchemaError(definition.name, violations)
        error = best_match(
            Draft202012Validator(definition.parameters).iter_errors(decoded)
        )
        if error is not None:
            raise ToolValidationError(
                f"Arguments for '{definition.name}' rejected at "
                f"{error.json_path}: {error.message}",
                field=error.json_path,
            )
        return decoded

    if not isinstance(definition.parameters, dict) or not definition.parameters:
        return decoded
    try:
        Draft202012Validator.check_schema(definition.parameters)
    except SchemaError as e:
        logger.warning(
            f"Skipping argument validation, invalid schema: {e.message}",
            extra={"tool_name": definition.name},
        )
        return decoded
    error = best_match(
        Draft202012Validator(definition.parameters).iter_errors(decoded)
    )
    if error is not None:
        logger.warning(
            f"Arguments do not match schema at {error.json_path}: {error.message}",
            extra={"tool_name": definition.name},
        )
    return decoded
