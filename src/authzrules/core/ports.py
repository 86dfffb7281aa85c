from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Protocol, runtime_checkable


@runtime_checkable
class DataReader(Protocol):
    """Read/query access to domain objects, used only by predicates."""

    def read(self, resource_id: str) -> Optional[Mapping[str, Any]]: ...

    def query(self, resource_id: str, params: Mapping[str, Any]) -> List[Mapping[str, Any]]: ...


@runtime_checkable
class RoleResolver(Protocol):
    def expand(self, roles: List[str] | None) -> List[str]: ...


@runtime_checkable
class DecisionLogSink(Protocol):
    """Receives one payload per decision. Must not block the decision path."""

    def log(self, payload: Dict[str, Any]) -> None: ...


@runtime_checkable
class MetricsSink(Protocol):
    def inc(self, name: str, labels: Dict[str, str] | None = None) -> None: ...


@runtime_checkable
class MetricsObserve(Protocol):
    def observe(self, name: str, value: float, labels: Dict[str, str] | None = None) -> None: ...


@runtime_checkable
class PolicySource(Protocol):
    """Where rule configuration comes from."""

    def load(self) -> Any: ...

    def etag(self) -> Optional[str]: ...


__all__ = [
    "DataReader",
    "RoleResolver",
    "DecisionLogSink",
    "MetricsSink",
    "MetricsObserve",
    "PolicySource",
]
