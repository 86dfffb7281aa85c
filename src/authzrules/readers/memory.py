from __future__ import annotations

import copy
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..core.ports import DataReader

QueryHandler = Callable[[Mapping[str, Any]], List[Mapping[str, Any]]]


class MemoryDataReader(DataReader):
    """Dict-backed DataReader for tests, the CLI and small deployments.

    ``records`` maps resource ids to objects. ``queries`` maps a resource id
    either to a list of results keyed by ``_queryId`` or to a callable taking
    the query parameters.
    """

    def __init__(
        self,
        records: Optional[Mapping[str, Mapping[str, Any]]] = None,
        queries: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.records: Dict[str, Mapping[str, Any]] = dict(records or {})
        self.queries: Dict[str, Any] = dict(queries or {})

    def read(self, resource_id: str) -> Optional[Mapping[str, Any]]:
        record = self.records.get(resource_id)
        # hand out copies so predicates cannot change the store
        return copy.deepcopy(record) if record is not None else None

    def query(self, resource_id: str, params: Mapping[str, Any]) -> List[Mapping[str, Any]]:
        handler = self.queries.get(resource_id)
        if handler is None:
            raise LookupError(f"no query handler for {resource_id!r}")
        if callable(handler):
            return list(handler(params))
        query_id = params.get("_queryId")
        if isinstance(handler, Mapping):
            return copy.deepcopy(list(handler.get(query_id, [])))
        return copy.deepcopy(list(handler))


__all__ = ["MemoryDataReader"]
