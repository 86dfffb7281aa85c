from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from ..dsl.validate import extract_rules, rule_errors
from .errors import ConfigurationError
from .model import Rule, RuleSet
from .patterns import is_valid_pattern
from .predicates import PredicateRegistry
from .sets import ValueSet

logger = logging.getLogger("authzrules.loader")


def _value_set(raw: Mapping[str, Any], key: str, index: int, problems: List[str]) -> Optional[ValueSet]:
    try:
        return ValueSet.parse(raw[key])
    except ValueError as e:
        problems.append(f"rule #{index} {key}: {e}")
        return None


def _build_rule(raw: Mapping[str, Any], index: int, registry: PredicateRegistry, problems: List[str]) -> Rule:
    pattern = raw["pattern"]
    if not is_valid_pattern(pattern):
        problems.append(
            f"rule #{index}: invalid pattern {pattern!r} (expected '*', an exact id or a 'prefix/*' pattern)"
        )

    roles = _value_set(raw, "roles", index, problems)
    if roles is not None and not roles:
        problems.append(f"rule #{index}: roles must be '*' or a non-empty list")
    methods = _value_set(raw, "methods", index, problems)
    actions = _value_set(raw, "actions", index, problems)

    name = raw.get("predicate")
    check = None
    if name is not None:
        if name in registry:
            check = registry.resolve(name)
        else:
            problems.append(f"rule #{index}: unknown predicate {name!r}")

    return Rule(
        pattern=pattern,
        roles=roles if roles is not None else ValueSet(),
        methods=methods if methods is not None else ValueSet(),
        actions=actions if actions is not None else ValueSet(),
        predicate=name,
        id=raw.get("id"),
        index=index,
        check=check,
    )


def load_rules(
    data: Any,
    registry: Optional[PredicateRegistry] = None,
    *,
    source: Optional[str] = None,
) -> RuleSet:
    """Validate rule configuration *data* and build an immutable RuleSet.

    All problems are collected and raised together as a ConfigurationError;
    nothing is returned unless every rule is valid and every predicate name
    resolves in *registry*.
    """
    registry = registry if registry is not None else PredicateRegistry()

    records, problems = extract_rules(data)
    if records is None:
        raise ConfigurationError(problems)

    rules: List[Rule] = []
    seen_ids: dict[str, int] = {}
    for index, raw in enumerate(records):
        shape = rule_errors(raw, index)
        if shape:
            problems.extend(shape)
            continue
        rule = _build_rule(raw, index, registry, problems)
        if rule.id is not None:
            if rule.id in seen_ids:
                problems.append(f"rule #{index}: duplicate id {rule.id!r} (first used by rule #{seen_ids[rule.id]})")
            else:
                seen_ids[rule.id] = index
        rules.append(rule)

    if problems:
        logger.error("authzrules: rejected rule configuration with %d problem(s)", len(problems))
        raise ConfigurationError(problems)

    logger.debug("authzrules: loaded %d rules from %s", len(rules), source or "<memory>")
    return RuleSet(rules=tuple(rules), source=source)


__all__ = ["load_rules"]
