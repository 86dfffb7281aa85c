from __future__ import annotations

import threading
from typing import Callable, Dict, Iterator, Mapping, Optional, overload

from .errors import UnknownPredicateError
from .model import EvaluationContext, Predicate


class PredicateRegistry:
    """Named custom checks that rules may refer to.

    Populated by the embedding application before rules are loaded. The loader
    resolves every name eagerly and binds the callable into the rule, so a
    rule set never looks a name up at request time.
    """

    def __init__(self, predicates: Optional[Mapping[str, Predicate]] = None) -> None:
        self._lock = threading.Lock()
        self._predicates: Dict[str, Predicate] = {}
        self._frozen = False
        for name, fn in (predicates or {}).items():
            self.register(name, fn)

    @overload
    def register(self, name: str) -> Callable[[Predicate], Predicate]: ...

    @overload
    def register(self, name: str, fn: Predicate) -> Predicate: ...

    def register(self, name: str, fn: Optional[Predicate] = None):
        """Register *fn* under *name*; without *fn* acts as a decorator."""
        if fn is None:

            def _decorator(f: Predicate) -> Predicate:
                return self.register(name, f)

            return _decorator

        if not name or not isinstance(name, str):
            raise ValueError("predicate name must be a non-empty string")
        if not callable(fn):
            raise TypeError(f"predicate {name!r} is not callable")
        with self._lock:
            if self._frozen:
                raise RuntimeError("registry is frozen")
            self._predicates[name] = fn
        return fn

    def resolve(self, name: str) -> Predicate:
        try:
            return self._predicates[name]
        except KeyError:
            raise UnknownPredicateError(name) from None

    def freeze(self) -> "PredicateRegistry":
        """Return a read-only copy of this registry."""
        frozen = PredicateRegistry(dict(self._predicates))
        frozen._frozen = True
        return frozen

    def names(self) -> list[str]:
        return sorted(self._predicates)

    def __contains__(self, name: object) -> bool:
        return name in self._predicates

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._predicates)


def any_of(*predicates: Predicate) -> Predicate:
    """Allow if any predicate returns True. Evaluated left to right, lazily."""

    def _any(ctx: EvaluationContext) -> bool:
        return any(p(ctx) is True for p in predicates)

    return _any


def all_of(*predicates: Predicate) -> Predicate:
    def _all(ctx: EvaluationContext) -> bool:
        return all(p(ctx) is True for p in predicates)

    return _all


__all__ = ["PredicateRegistry", "any_of", "all_of"]
