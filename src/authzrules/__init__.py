from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .core.engine import Guard
from .core.errors import AuthzError, ConfigurationError, PredicateError, UnknownPredicateError
from .core.loader import load_rules
from .core.model import (
    AccessRequest,
    Decision,
    EvaluationContext,
    ParentRequest,
    Rule,
    RuleSet,
    SecurityContext,
)
from .core.predicates import PredicateRegistry, all_of, any_of
from .storage import FilePolicySource, HotReloader


def _detect_version() -> str:
    try:
        return version("authzrules")
    except PackageNotFoundError:
        return "0.1.0"


__version__ = _detect_version()

__all__ = [
    "Guard",
    "AuthzError",
    "ConfigurationError",
    "PredicateError",
    "UnknownPredicateError",
    "load_rules",
    "AccessRequest",
    "Decision",
    "EvaluationContext",
    "ParentRequest",
    "Rule",
    "RuleSet",
    "SecurityContext",
    "PredicateRegistry",
    "all_of",
    "any_of",
    "FilePolicySource",
    "HotReloader",
    "__version__",
]
