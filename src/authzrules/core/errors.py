from __future__ import annotations

from typing import Iterable


class AuthzError(Exception):
    """Base class for all authzrules errors."""


class ConfigurationError(AuthzError):
    """A rule set could not be loaded.

    ``problems`` lists every issue found, in rule order, so that a single
    failed load reports everything that needs fixing.
    """

    def __init__(self, problems: Iterable[str] | str) -> None:
        if isinstance(problems, str):
            problems = [problems]
        self.problems: list[str] = list(problems)
        super().__init__("; ".join(self.problems) or "invalid rule configuration")


class UnknownPredicateError(ConfigurationError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"unknown predicate {name!r}")


class PredicateError(AuthzError):
    """A custom predicate failed while being evaluated for a rule.

    Created by the evaluator and attached to the decision; never raised out of
    ``evaluate`` or ``Guard.authorize``.
    """

    def __init__(self, rule_index: int, predicate: str, cause: BaseException) -> None:
        self.rule_index = rule_index
        self.predicate = predicate
        self.cause = cause
        super().__init__(f"predicate {predicate!r} of rule #{rule_index} failed: {cause!r}")


__all__ = ["AuthzError", "ConfigurationError", "UnknownPredicateError", "PredicateError"]
