from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Any, FrozenSet, Iterable, Optional

WILDCARD = "*"

# Request-side sentinel: the request carries no method, so the method
# dimension does not constrain the decision.
NOT_APPLICABLE: Optional[str] = None


@dataclass(frozen=True)
class ValueSet:
    """Allowed roles, methods or actions of a rule.

    Either the universal wildcard or a (possibly empty) set of exact strings.
    An empty set allows nothing.
    """

    values: FrozenSet[str] = frozenset()
    wildcard: bool = False

    @classmethod
    def any(cls) -> "ValueSet":
        return cls(wildcard=True)

    @classmethod
    def parse(cls, raw: Any) -> "ValueSet":
        """Build a ValueSet from ``"*"``, ``"a,b"``, ``""`` or a list of strings.

        Raises TypeError for anything else, and ValueError when ``"*"`` is
        combined with other items.
        """
        if isinstance(raw, str):
            items: Iterable[Any] = raw.split(",")
        elif isinstance(raw, (list, tuple, set, frozenset)):
            items = raw
        else:
            raise TypeError(f"expected a string or a list of strings, got {type(raw).__name__}")

        values = set()
        for item in items:
            if not isinstance(item, str):
                raise TypeError(f"expected string items, got {type(item).__name__}")
            item = item.strip()
            if item:
                values.add(item)
        if WILDCARD in values:
            if len(values) > 1:
                raise ValueError(f"'*' cannot be combined with other values: {sorted(values)}")
            return cls.any()
        return cls(values=frozenset(values))

    def __contains__(self, value: object) -> bool:
        return self.wildcard or value in self.values

    def __bool__(self) -> bool:
        return self.wildcard or bool(self.values)

    def issuperset(self, other: "ValueSet") -> bool:
        if self.wildcard:
            return True
        if other.wildcard:
            return False
        return self.values >= other.values

    def to_config(self) -> str:
        if self.wildcard:
            return WILDCARD
        return ",".join(sorted(self.values))


def roles_match(caller_roles: AbstractSet[str] | Iterable[str], allowed_roles: ValueSet) -> bool:
    """True if any of the caller's roles is allowed."""
    if allowed_roles.wildcard:
        return True
    return any(role in allowed_roles.values for role in caller_roles)


def value_matches(value: Optional[str], allowed_values: ValueSet) -> bool:
    """Check a request method against a rule.

    A request that carries no method (``None``) passes regardless of what the
    rule allows. Any other value, the empty string included, must be allowed.
    """
    if value is NOT_APPLICABLE:
        return True
    if allowed_values.wildcard:
        return True
    return value in allowed_values.values


def action_matches(action: str, allowed_actions: ValueSet) -> bool:
    """Check a request action against a rule; an empty action passes."""
    if action == "":
        return True
    return value_matches(action, allowed_actions)


__all__ = ["WILDCARD", "NOT_APPLICABLE", "ValueSet", "roles_match", "value_matches", "action_matches"]
