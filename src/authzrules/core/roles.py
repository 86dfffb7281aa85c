from __future__ import annotations

from typing import Dict, List, Mapping, Sequence


class StaticRoleResolver:
    """Expand roles through a static inheritance map.

    ``{"openidm-admin": ["openidm-authorized"]}`` gives every admin the
    authorized-user role too. Expansion is transitive and tolerates cycles.
    """

    def __init__(self, graph: Mapping[str, Sequence[str]] | None = None) -> None:
        self.graph: Dict[str, List[str]] = {k: list(v) for k, v in (graph or {}).items()}

    def expand(self, roles: Sequence[str] | None) -> List[str]:
        if not roles:
            return []
        out = set()
        stack = list(roles)
        while stack:
            role = stack.pop()
            if role in out:
                continue
            out.add(role)
            stack.extend(self.graph.get(role, ()))
        return sorted(out)


__all__ = ["StaticRoleResolver"]
