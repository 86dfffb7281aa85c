from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, FrozenSet, Iterator, Mapping, Optional, Tuple

from .sets import ValueSet

Predicate = Callable[["EvaluationContext"], bool]

REASON_MATCHED = "matched"
REASON_BYPASS = "bypass"
REASON_NO_MATCH = "no_matching_rule"
REASON_PREDICATE_DENIED = "predicate_denied"


def _frozen_mapping(data: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return MappingProxyType(dict(data or {}))


# ---------------------------------------------------------------- requests --


@dataclass(frozen=True)
class SecurityContext:
    """Authenticated caller attached to a network request."""

    username: Optional[str] = None
    user_id: Optional[str] = None
    roles: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ParentRequest:
    """The transport-level request that triggered the operation.

    ``type`` names the channel; only network channels (``"http"`` by default)
    are subject to rule evaluation.
    """

    type: str
    security: Optional[SecurityContext] = None


@dataclass(frozen=True)
class AccessRequest:
    id: str
    method: Optional[str] = None
    params: Mapping[str, Any] = field(default_factory=dict)
    value: Any = None
    parent: Optional[ParentRequest] = None

    @property
    def action(self) -> str:
        """The ``_action`` parameter; ``""`` only when none was sent.

        Values that are not strings are stringified so they go through
        ordinary matching instead of counting as "no action".
        """
        action = (self.params or {}).get("_action")
        if action is None:
            return ""
        return action if isinstance(action, str) else str(action)


# ----------------------------------------------------------------- context --


@dataclass(frozen=True)
class EvaluationContext:
    """Per-request input of the evaluator.

    The engine reads ``resource_id``, ``roles``, ``method`` and ``action`` only;
    ``extra`` is for predicates.
    """

    resource_id: str
    roles: FrozenSet[str] = frozenset()
    method: Optional[str] = None
    action: str = ""
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "roles", frozenset(self.roles))
        object.__setattr__(self, "extra", _frozen_mapping(self.extra))

    @property
    def params(self) -> Mapping[str, Any]:
        return self.extra.get("params") or {}

    @property
    def value(self) -> Any:
        return self.extra.get("value")

    @property
    def username(self) -> Optional[str]:
        return self.extra.get("username")

    @property
    def user_id(self) -> Optional[str]:
        return self.extra.get("user_id")


# ------------------------------------------------------------------- rules --


@dataclass(frozen=True)
class Rule:
    pattern: str
    roles: ValueSet
    methods: ValueSet
    actions: ValueSet
    predicate: Optional[str] = None
    id: Optional[str] = None
    index: int = 0
    # resolved at load time; not part of equality
    check: Optional[Predicate] = field(default=None, compare=False, repr=False)

    @property
    def label(self) -> str:
        return self.id if self.id is not None else f"#{self.index}"


@dataclass(frozen=True)
class RuleSet:
    """Ordered, immutable collection of rules. Order is evaluation order."""

    rules: Tuple[Rule, ...] = ()
    source: Optional[str] = None

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def __getitem__(self, index: int) -> Rule:
        return self.rules[index]


# ---------------------------------------------------------------- decision --


@dataclass(frozen=True)
class PredicateFailure:
    rule_index: int
    rule_id: Optional[str]
    predicate: str
    error: str


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str
    rule_index: Optional[int] = None
    rule_id: Optional[str] = None
    predicate_errors: Tuple[PredicateFailure, ...] = ()

    @property
    def effect(self) -> str:
        return "allow" if self.allowed else "deny"

    def to_dict(self) -> dict[str, Any]:
        return {
            "decision": self.effect,
            "allowed": self.allowed,
            "reason": self.reason,
            "rule_index": self.rule_index,
            "rule_id": self.rule_id,
            "predicate_errors": [
                {
                    "rule_index": f.rule_index,
                    "rule_id": f.rule_id,
                    "predicate": f.predicate,
                    "error": f.error,
                }
                for f in self.predicate_errors
            ],
        }


__all__ = [
    "Predicate",
    "SecurityContext",
    "ParentRequest",
    "AccessRequest",
    "EvaluationContext",
    "Rule",
    "RuleSet",
    "PredicateFailure",
    "Decision",
    "REASON_MATCHED",
    "REASON_BYPASS",
    "REASON_NO_MATCH",
    "REASON_PREDICATE_DENIED",
]
