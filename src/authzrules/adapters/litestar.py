from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from litestar.middleware import ASGIMiddleware
from litestar.types import ASGIApp, Receive, Scope, Send

from ..core.engine import Guard
from ..logging.context import clear_current_trace_id, gen_trace_id, set_current_trace_id
from ._common import request_from_scope, send_denied, trace_id_from_headers

logger = logging.getLogger("authzrules.adapters.litestar")

ScopeBuilder = Callable[[Scope], Any]


class AuthzMiddleware(ASGIMiddleware):
    """Litestar middleware enforcing a Guard on every HTTP request.

    Non-HTTP scopes (websocket, lifespan) pass through untouched. Denied
    requests get a bare ``403 {"detail": "Access denied"}``.

    Usage::

        app = Litestar(route_handlers=[...], middleware=[AuthzMiddleware(guard=guard)])
    """

    def __init__(self, *, guard: Guard, build_request: Optional[ScopeBuilder] = None) -> None:
        self.guard = guard
        self.build_request = build_request or request_from_scope

    async def handle(self, scope: Scope, receive: Receive, send: Send, next_app: ASGIApp) -> None:
        if scope.get("type") != "http":
            await next_app(scope, receive, send)
            return

        token = set_current_trace_id(trace_id_from_headers(scope.get("headers")) or gen_trace_id())
        try:
            decision = await self.guard.authorize_async(self.build_request(scope))
        finally:
            clear_current_trace_id(token)

        if decision.allowed:
            await next_app(scope, receive, send)
            return
        logger.debug("authzrules: rejecting %s %s", scope.get("method"), scope.get("path"))
        await send_denied(send)


__all__ = ["AuthzMiddleware"]
