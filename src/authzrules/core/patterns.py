"""Resource identifier patterns.

Three forms are recognised:

* ``"*"``           matches every resource id, including the empty one;
* ``"managed/*"``   matches every id starting with ``"managed/"``
                    (but not ``"managed"`` itself, which needs its own rule);
* anything else     matches only the identical id.

Comparison is a literal, case-sensitive string comparison. No path
normalisation is applied, so ``"managed/../config"`` is simply an id that
starts with ``"managed/"``.
"""

from __future__ import annotations

from typing import Literal

WILDCARD = "*"
PREFIX_SUFFIX = "/*"

PatternKind = Literal["any", "prefix", "exact"]


def matches(resource_id: str, pattern: str) -> bool:
    if pattern == WILDCARD:
        return True
    if resource_id == pattern:
        return True
    if pattern.endswith(PREFIX_SUFFIX):
        # keep the trailing "/" so "managed/*" does not match "managedfoo"
        return resource_id.startswith(pattern[:-1])
    return False


def pattern_kind(pattern: str) -> PatternKind:
    if pattern == WILDCARD:
        return "any"
    if pattern.endswith(PREFIX_SUFFIX):
        return "prefix"
    return "exact"


def is_valid_pattern(pattern: object) -> bool:
    """Return True if *pattern* is one of the three recognised forms."""
    if not isinstance(pattern, str) or not pattern:
        return False
    if pattern == WILDCARD:
        return True
    if pattern.endswith(PREFIX_SUFFIX):
        return WILDCARD not in pattern[:-1]
    return WILDCARD not in pattern


def covers(outer: str, inner: str) -> bool:
    """Return True if every id matched by *inner* is also matched by *outer*."""
    if outer == WILDCARD:
        return True
    if inner == WILDCARD:
        return False
    if pattern_kind(outer) == "prefix":
        return inner.startswith(outer[:-1])
    # an exact pattern only covers itself
    return pattern_kind(inner) == "exact" and inner == outer


__all__ = ["WILDCARD", "matches", "pattern_kind", "is_valid_pattern", "covers"]
