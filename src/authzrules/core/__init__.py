from .engine import Guard
from .errors import AuthzError, ConfigurationError, PredicateError, UnknownPredicateError
from .evaluator import evaluate
from .loader import load_rules
from .model import (
    AccessRequest,
    Decision,
    EvaluationContext,
    ParentRequest,
    PredicateFailure,
    Rule,
    RuleSet,
    SecurityContext,
)
from .patterns import matches
from .predicates import PredicateRegistry, all_of, any_of
from .sets import NOT_APPLICABLE, ValueSet, action_matches, roles_match, value_matches

__all__ = [
    "Guard",
    "AuthzError",
    "ConfigurationError",
    "PredicateError",
    "UnknownPredicateError",
    "evaluate",
    "load_rules",
    "AccessRequest",
    "Decision",
    "EvaluationContext",
    "ParentRequest",
    "PredicateFailure",
    "Rule",
    "RuleSet",
    "SecurityContext",
    "matches",
    "PredicateRegistry",
    "all_of",
    "any_of",
    "NOT_APPLICABLE",
    "ValueSet",
    "roles_match",
    "value_matches",
    "action_matches",
]
