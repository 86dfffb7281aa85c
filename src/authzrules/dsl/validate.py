from __future__ import annotations

from typing import Any, List, Tuple

from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match

from ..core.errors import ConfigurationError

_VALUES = {
    "oneOf": [
        {"type": "string"},
        {"type": "array", "items": {"type": "string"}},
    ]
}

RULE_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "authzrules access rule",
    "type": "object",
    "required": ["pattern", "roles", "methods", "actions"],
    "additionalProperties": False,
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "description": {"type": "string"},
        "pattern": {"type": "string", "minLength": 1},
        "roles": _VALUES,
        "methods": _VALUES,
        "actions": _VALUES,
        "predicate": {"type": "string", "minLength": 1},
    },
}

RULE_LIST_KEYS = ("rules", "configs")

_RULE_VALIDATOR = Draft202012Validator(RULE_SCHEMA)


def extract_rules(data: Any) -> Tuple[Any, List[str]]:
    """Return the list of rule records in *data* and any top-level problems.

    Accepts a bare list or a mapping holding the list under ``"rules"`` or
    ``"configs"``.
    """
    if isinstance(data, list):
        return data, []
    if isinstance(data, dict):
        present = [k for k in RULE_LIST_KEYS if k in data]
        if len(present) != 1:
            return None, ["<root>: expected exactly one of 'rules' or 'configs'"]
        rules = data[present[0]]
        if not isinstance(rules, list):
            return None, [f"{present[0]}: expected a list of rules"]
        return rules, []
    return None, [f"<root>: expected a list or a mapping, got {type(data).__name__}"]


def rule_errors(rule: Any, index: int) -> List[str]:
    out: List[str] = []
    for err in sorted(_RULE_VALIDATOR.iter_errors(rule), key=lambda e: list(e.path)):
        best = best_match([err]) or err
        where = "/".join(str(p) for p in best.absolute_path)
        prefix = f"rule #{index}" + (f" {where}" if where else "")
        out.append(f"{prefix}: {best.message}")
    return out


def schema_errors(data: Any) -> List[str]:
    """Return human readable shape violations of *data*, empty when valid."""
    rules, problems = extract_rules(data)
    if rules is None:
        return problems
    for i, rule in enumerate(rules):
        problems.extend(rule_errors(rule, i))
    return problems


def validate_rules(data: Any) -> None:
    """Raise ConfigurationError if *data* does not have the rule config shape."""
    problems = schema_errors(data)
    if problems:
        raise ConfigurationError(problems)


__all__ = ["RULE_SCHEMA", "extract_rules", "rule_errors", "schema_errors", "validate_rules"]
