"""Static checks over rule ordering.

Rules are evaluated first-match-wins, so order is part of the configuration
contract. The linter reports, in rule order:

* ``UNREACHABLE_RULE`` - every request the rule could grant is already granted
  by an earlier rule without a predicate;
* ``EMPTY_GRANT`` - empty methods or actions; the rule only grants requests
  that carry no method (or no action);
* ``DUPLICATE_ID`` - two rules share an id.

Input is raw configuration data; rules that fail shape validation are
skipped (use ``validate`` for those).
"""

from __future__ import annotations

from typing import Any, Dict, List

from ..core.patterns import covers
from ..core.sets import ValueSet
from .validate import extract_rules, rule_errors

Issue = Dict[str, Any]


def _issue(code: str, index: int, message: str, severity: str = "warning", **extra: Any) -> Issue:
    out: Issue = {"code": code, "severity": severity, "rule": index, "message": message}
    out.update(extra)
    return out


def _parsed(raw: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "pattern": raw["pattern"],
        "roles": ValueSet.parse(raw["roles"]),
        "methods": ValueSet.parse(raw["methods"]),
        "actions": ValueSet.parse(raw["actions"]),
        "predicate": raw.get("predicate"),
        "id": raw.get("id"),
    }


def _shadows(earlier: Dict[str, Any], later: Dict[str, Any]) -> bool:
    if earlier["predicate"] is not None:
        return False
    return (
        covers(earlier["pattern"], later["pattern"])
        and earlier["roles"].issuperset(later["roles"])
        and earlier["methods"].issuperset(later["methods"])
        and earlier["actions"].issuperset(later["actions"])
    )


def analyze_rules(data: Any) -> List[Issue]:
    records, _ = extract_rules(data)
    if records is None:
        return []

    issues: List[Issue] = []
    seen: List[tuple[int, Dict[str, Any]]] = []
    ids: Dict[str, int] = {}

    for index, raw in enumerate(records):
        if rule_errors(raw, index):
            continue
        try:
            rule = _parsed(raw)
        except ValueError:
            # mixed '*' values; load_rules reports those
            continue

        if rule["id"] is not None:
            if rule["id"] in ids:
                issues.append(
                    _issue(
                        "DUPLICATE_ID",
                        index,
                        f"id {rule['id']!r} already used by rule #{ids[rule['id']]}",
                        severity="error",
                        first=ids[rule["id"]],
                    )
                )
            else:
                ids[rule["id"]] = index

        if not rule["methods"] or not rule["actions"]:
            empty = "methods" if not rule["methods"] else "actions"
            issues.append(
                _issue(
                    "EMPTY_GRANT",
                    index,
                    f"{empty} is empty; the rule only grants requests without a {empty[:-1]}",
                    severity="info",
                )
            )

        for prev_index, prev in seen:
            if _shadows(prev, rule):
                issues.append(
                    _issue(
                        "UNREACHABLE_RULE",
                        index,
                        f"every request this rule grants is already granted by rule #{prev_index}",
                        shadowed_by=prev_index,
                    )
                )
                break
        seen.append((index, rule))

    return issues


__all__ = ["analyze_rules"]
