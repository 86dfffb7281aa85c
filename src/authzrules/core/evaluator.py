"""First-match-wins evaluation of a RuleSet.

Rules are independent grants rather than layered filters: a request is denied
unless some rule grants it. A rule whose static conditions hold but whose
predicate says no (or fails) simply does not grant; later rules are still
tried.
"""

from __future__ import annotations

import logging
from typing import List

from .errors import PredicateError
from .model import (
    REASON_MATCHED,
    REASON_NO_MATCH,
    REASON_PREDICATE_DENIED,
    Decision,
    EvaluationContext,
    PredicateFailure,
    Rule,
    RuleSet,
)
from .patterns import matches
from .sets import action_matches, roles_match, value_matches

logger = logging.getLogger("authzrules.evaluator")


def static_match(rule: Rule, context: EvaluationContext) -> bool:
    """Pattern, roles, method and action checks of a single rule."""
    return (
        matches(context.resource_id, rule.pattern)
        and roles_match(context.roles, rule.roles)
        and value_matches(context.method, rule.methods)
        and action_matches(context.action, rule.actions)
    )


def _run_predicate(rule: Rule, context: EvaluationContext, failures: List[PredicateFailure]) -> bool:
    check = rule.check
    try:
        return check is not None and check(context) is True
    except Exception as e:
        err = PredicateError(rule.index, rule.predicate or "", e)
        logger.warning(
            "authzrules: %s (rule %s, resource %r)",
            err,
            rule.label,
            context.resource_id,
            exc_info=e,
        )
        failures.append(
            PredicateFailure(
                rule_index=rule.index,
                rule_id=rule.id,
                predicate=rule.predicate or "",
                error=f"{type(e).__name__}: {e}",
            )
        )
        return False


def evaluate(ruleset: RuleSet, context: EvaluationContext) -> Decision:
    failures: List[PredicateFailure] = []
    predicate_denied = False

    for rule in ruleset:
        if not static_match(rule, context):
            continue
        if rule.predicate is None:
            return Decision(True, REASON_MATCHED, rule.index, rule.id, tuple(failures))
        if rule.check is None:
            # a rule that names a predicate but was never bound cannot grant
            predicate_denied = True
            continue
        if _run_predicate(rule, context, failures):
            return Decision(True, REASON_MATCHED, rule.index, rule.id, tuple(failures))
        predicate_denied = True

    reason = REASON_PREDICATE_DENIED if predicate_denied else REASON_NO_MATCH
    return Decision(False, reason, predicate_errors=tuple(failures))


__all__ = ["evaluate", "static_match"]
