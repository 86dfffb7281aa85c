from __future__ import annotations

import asyncio
import logging
import threading
import time
from typing import Any, Dict, Iterable, Optional

from ..logging.context import get_current_trace_id
from .evaluator import evaluate
from .loader import load_rules
from .model import (
    REASON_BYPASS,
    AccessRequest,
    Decision,
    EvaluationContext,
    RuleSet,
)
from .ports import DecisionLogSink, MetricsSink, RoleResolver
from .predicates import PredicateRegistry

logger = logging.getLogger("authzrules.engine")

_BYPASS = Decision(True, REASON_BYPASS)


class Guard:
    """Decision façade used by the request pipeline.

    Holds the current RuleSet and the predicate registry. The RuleSet is never
    mutated; :meth:`set_policy` builds a new one and swaps the reference, so an
    evaluation always sees one consistent snapshot.

    Requests that do not come through a network channel, or that carry no
    security context, are trusted and allowed without evaluation.
    """

    def __init__(
        self,
        policy: Any,
        registry: Optional[PredicateRegistry] = None,
        *,
        logger_sink: Optional[DecisionLogSink] = None,
        metrics: Optional[MetricsSink] = None,
        role_resolver: Optional[RoleResolver] = None,
        network_channels: Iterable[str] = ("http",),
    ) -> None:
        self.registry = registry if registry is not None else PredicateRegistry()
        self.logger_sink = logger_sink
        self.metrics = metrics
        self.role_resolver = role_resolver
        self.network_channels = frozenset(network_channels)
        self._lock = threading.Lock()
        self._ruleset = self._build(policy, None)

    # ---------------------------------------------------------------- policy

    def _build(self, policy: Any, source: Optional[str]) -> RuleSet:
        if isinstance(policy, RuleSet):
            return policy
        return load_rules(policy, self.registry, source=source)

    @property
    def ruleset(self) -> RuleSet:
        return self._ruleset

    def set_policy(self, policy: Any, *, source: Optional[str] = None) -> RuleSet:
        """Validate *policy* and make it the active RuleSet.

        Raises ConfigurationError and keeps the current RuleSet if *policy* is
        invalid.
        """
        ruleset = self._build(policy, source)
        with self._lock:
            self._ruleset = ruleset
        logger.info("authzrules: activated %d rules from %s", len(ruleset), source or "<memory>")
        return ruleset

    # --------------------------------------------------------------- context

    def _roles(self, roles: Iterable[str]) -> list[str]:
        base = list(roles)
        if self.role_resolver is None:
            return base
        try:
            return list(self.role_resolver.expand(base))
        except Exception as e:
            logger.exception("authzrules: role resolver failed; using unexpanded roles", exc_info=e)
            return base

    def build_context(self, request: AccessRequest) -> Optional[EvaluationContext]:
        """Return the evaluation context, or None when the request is trusted."""
        parent = request.parent
        if parent is None or parent.security is None or parent.type not in self.network_channels:
            return None
        security = parent.security
        return EvaluationContext(
            resource_id=request.id,
            roles=frozenset(self._roles(security.roles)),
            method=request.method,
            action=request.action,
            extra={
                "params": dict(request.params or {}),
                "value": request.value,
                "username": security.username,
                "user_id": security.user_id,
            },
        )

    # -------------------------------------------------------------- decisions

    def authorize(self, request: AccessRequest) -> Decision:
        context = self.build_context(request)
        if context is None:
            logger.debug("authzrules: trusted request for %r, skipping rules", request.id)
            self._emit(_BYPASS, None, 0.0, channel=getattr(request.parent, "type", None))
            return _BYPASS
        return self.evaluate_sync(context)

    async def authorize_async(self, request: AccessRequest) -> Decision:
        # predicates may block on their data reader
        return await asyncio.to_thread(self.authorize, request)

    def evaluate_sync(self, context: EvaluationContext) -> Decision:
        ruleset = self._ruleset
        start = time.perf_counter()
        decision = evaluate(ruleset, context)
        elapsed = time.perf_counter() - start
        if decision.allowed:
            logger.debug("authzrules: allowed %r by rule %s", context.resource_id, decision.rule_index)
        else:
            logger.debug("authzrules: denied %r (%s)", context.resource_id, decision.reason)
        self._emit(decision, context, elapsed, ruleset=ruleset)
        return decision

    def is_allowed(self, request: AccessRequest) -> bool:
        return self.authorize(request).allowed

    # ------------------------------------------------------------ observability

    def _payload(
        self,
        decision: Decision,
        context: Optional[EvaluationContext],
        ruleset: Optional[RuleSet],
        channel: Optional[str],
    ) -> Dict[str, Any]:
        payload = decision.to_dict()
        if context is not None:
            payload["request"] = {
                "resource": context.resource_id,
                "method": context.method,
                "action": context.action,
                "roles": sorted(context.roles),
                "user_id": context.user_id,
            }
        else:
            payload["request"] = {"channel": channel}
        if ruleset is not None and ruleset.source is not None:
            payload["ruleset"] = ruleset.source
        trace_id = get_current_trace_id()
        if trace_id is not None:
            payload["trace_id"] = trace_id
        return payload

    def _emit(
        self,
        decision: Decision,
        context: Optional[EvaluationContext],
        elapsed: float,
        *,
        ruleset: Optional[RuleSet] = None,
        channel: Optional[str] = None,
    ) -> None:
        if self.logger_sink is not None:
            try:
                self.logger_sink.log(self._payload(decision, context, ruleset, channel))
            except Exception as e:
                logger.exception("authzrules: decision logging failed", exc_info=e)

        if self.metrics is not None:
            labels = {"decision": decision.effect, "reason": decision.reason}
            try:
                self.metrics.inc("authzrules_decisions_total", labels)
            except Exception as e:
                logger.exception("authzrules: metrics inc failed", exc_info=e)
            observe = getattr(self.metrics, "observe", None)
            if observe is not None:
                try:
                    observe("authzrules_decision_seconds", elapsed, labels)
                except Exception as e:
                    logger.exception("authzrules: metrics observe failed", exc_info=e)


__all__ = ["Guard"]
