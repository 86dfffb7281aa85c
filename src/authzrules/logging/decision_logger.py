from __future__ import annotations

import json
import logging
import random
from typing import Any, Dict

from ..core.ports import DecisionLogSink


class DecisionLogger(DecisionLogSink):
    """Audit sink writing one record per decision to the ``authzrules.audit`` logger.

    Args:
        sample_rate: fraction of decisions to log, 0.0 .. 1.0.
        level: logging level of the records.
        as_json: emit the payload as a JSON line instead of ``decision {...}``.
        always_log_deny: denials and decisions with predicate failures bypass
            sampling, so they always reach the audit trail.
        include_bypass: also log trusted (non-network) requests.
    """

    def __init__(
        self,
        *,
        sample_rate: float = 1.0,
        level: int = logging.INFO,
        as_json: bool = False,
        always_log_deny: bool = True,
        include_bypass: bool = False,
    ) -> None:
        self.sample_rate = max(0.0, min(1.0, float(sample_rate)))
        self.level = level
        self.as_json = as_json
        self.always_log_deny = always_log_deny
        self.include_bypass = include_bypass
        self.logger = logging.getLogger("authzrules.audit")

    def _should_log(self, payload: Dict[str, Any]) -> bool:
        if payload.get("reason") == "bypass" and not self.include_bypass:
            return False
        if self.always_log_deny and (not payload.get("allowed") or payload.get("predicate_errors")):
            return True
        if self.sample_rate >= 1.0:
            return True
        return random.random() < self.sample_rate

    def log(self, payload: Dict[str, Any]) -> None:
        if not self._should_log(payload):
            return
        if self.as_json:
            msg = json.dumps(payload, ensure_ascii=False, default=str)
        else:
            msg = f"decision {payload}"
        self.logger.log(self.level, msg)


__all__ = ["DecisionLogger"]
