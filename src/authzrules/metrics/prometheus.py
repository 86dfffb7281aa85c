from __future__ import annotations

from typing import Any, Dict, Optional

from prometheus_client import CollectorRegistry, Counter, Histogram

from ..core.ports import MetricsSink

_LABELS = ("decision", "reason")


class PrometheusMetrics(MetricsSink):
    """Prometheus-based MetricsSink.

    Exposes:
      - authzrules_decisions_total{decision="allow|deny", reason="..."}
      - authzrules_decision_seconds{decision, reason} (Histogram)

    Pass a dedicated ``registry`` to keep instruments out of the default
    process-wide registry (useful in tests and when several guards coexist).
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        kwargs: Dict[str, Any] = {"labelnames": _LABELS}
        if registry is not None:
            kwargs["registry"] = registry
        self._counter = Counter(
            "authzrules_decisions_total",
            "Total authorization decisions by outcome.",
            **kwargs,
        )
        self._hist = Histogram(
            "authzrules_decision_seconds",
            "Rule evaluation duration in seconds.",
            **kwargs,
        )

    @staticmethod
    def _label_values(labels: Dict[str, str] | None) -> Dict[str, str]:
        labels = labels or {}
        return {name: str(labels.get(name, "unknown")) for name in _LABELS}

    # -- MetricsSink ------------------------------------------------------------

    def inc(self, name: str, labels: Dict[str, str] | None = None) -> None:
        """Increment the decision counter.

        *name* is accepted for interface compatibility; this sink always
        increments ``authzrules_decisions_total``.
        """
        self._counter.labels(**self._label_values(labels)).inc()

    def observe(self, name: str, value: float, labels: Dict[str, str] | None = None) -> None:
        self._hist.labels(**self._label_values(labels)).observe(float(value))


__all__ = ["PrometheusMetrics"]
