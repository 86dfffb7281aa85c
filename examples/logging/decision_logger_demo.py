#!/usr/bin/env python3
"""
DecisionLogger configuration demo.

Run:
  python examples/logging/decision_logger_demo.py

This script shows:
  1) Text records, every decision logged
  2) JSON lines with sampling (denials are always kept)
  3) Trace ids stamped on engine logs via TraceIdFilter

It emits to stdout via the 'authzrules.audit' logger.
"""

import logging

from authzrules import AccessRequest, Guard, ParentRequest, SecurityContext
from authzrules.logging.context import TraceIdFilter, clear_current_trace_id, set_current_trace_id
from authzrules.logging.decision_logger import DecisionLogger

RULES = [
    {"id": "info", "pattern": "info/*", "roles": "*", "methods": "read", "actions": "*"},
    {"id": "admin", "pattern": "*", "roles": "openidm-admin", "methods": "*", "actions": "*"},
]


def setup_logging() -> None:
    """Configure logging so 'authzrules.audit' emits to stdout."""
    root = logging.getLogger()
    if not root.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter("%(levelname)s %(name)s [%(trace_id)s] %(message)s"))
        h.addFilter(TraceIdFilter())
        root.addHandler(h)
    root.setLevel(logging.INFO)


def run_guard(guard: Guard) -> None:
    """Fire an allow and a deny."""
    sec = SecurityContext(username="bob", user_id="u7", roles=("openidm-authorized",))
    guard.authorize(AccessRequest(id="info/ping", method="read", parent=ParentRequest("http", sec)))
    guard.authorize(AccessRequest(id="managed/user/1", method="delete", parent=ParentRequest("http", sec)))


def main() -> None:
    setup_logging()

    print("\n=== 1) Text records ===")
    run_guard(Guard(RULES, logger_sink=DecisionLogger()))

    print("\n=== 2) JSON lines, allow sampled at 5% ===")
    run_guard(Guard(RULES, logger_sink=DecisionLogger(as_json=True, sample_rate=0.05)))

    print("\n=== 3) With a trace id ===")
    token = set_current_trace_id("req-1234")
    try:
        run_guard(Guard(RULES, logger_sink=DecisionLogger(as_json=True)))
    finally:
        clear_current_trace_id(token)

    print("\nDone. Check log lines above (logger name: 'authzrules.audit').")


if __name__ == "__main__":
    main()
