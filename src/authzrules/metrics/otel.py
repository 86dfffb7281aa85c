from __future__ import annotations

from typing import Any, Dict, Optional

from opentelemetry.metrics import Meter, get_meter

from ..core.ports import MetricsSink


class OpenTelemetryMetrics(MetricsSink):
    """OpenTelemetry-based MetricsSink.

    Creates:
      - Counter: authzrules_decisions_total (attributes: decision, reason)
      - Histogram: authzrules_decision_seconds (unit: s)

    Without a configured MeterProvider the API hands out no-op instruments, so
    this sink is safe to install before telemetry is set up.
    """

    def __init__(self, meter: Optional[Meter] = None) -> None:
        meter = meter or get_meter("authzrules.metrics")
        self._counter: Any = meter.create_counter(
            name="authzrules_decisions_total",
            description="Total authorization decisions by outcome.",
        )
        self._hist: Any = meter.create_histogram(
            name="authzrules_decision_seconds",
            description="Rule evaluation duration in seconds.",
            unit="s",
        )

    # -- MetricsSink ------------------------------------------------------------

    def inc(self, name: str, labels: Dict[str, str] | None = None) -> None:
        self._counter.add(1, dict(labels or {}))

    def observe(self, name: str, value: float, labels: Dict[str, str] | None = None) -> None:
        self._hist.record(float(value), dict(labels or {}))


__all__ = ["OpenTelemetryMetrics"]
