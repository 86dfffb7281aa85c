from __future__ import annotations

import functools
import inspect
from typing import Any, Callable, Optional

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..core.engine import Guard
from ..logging.context import clear_current_trace_id, gen_trace_id, set_current_trace_id
from ._common import DENIED_BODY, DENIED_STATUS, RequestBuilder, request_from_scope


def _default_builder(request: Request) -> Any:
    return request_from_scope(request.scope)


def require_access(guard: Guard, build_request: Optional[RequestBuilder] = None) -> Callable[..., Any]:
    """Starlette adapter usable two ways:

    - as a decorator on an endpoint (sync or async), returning an async endpoint;
    - as a dependency: ``deny = await require_access(guard)(request)`` gives
      ``None`` when allowed, or the 403 response to return.

    Denials carry a generic body only; why a request was denied goes to the
    guard's audit sink, never to the client.
    """
    builder = build_request or _default_builder

    async def _check(request: Request) -> Optional[Response]:
        token = set_current_trace_id(request.headers.get("x-request-id") or gen_trace_id())
        try:
            decision = await guard.authorize_async(builder(request))
        finally:
            clear_current_trace_id(token)
        if decision.allowed:
            return None
        return JSONResponse(DENIED_BODY, status_code=DENIED_STATUS)

    def _decorator_or_dependency(arg: Any) -> Any:
        if isinstance(arg, Request):
            return _check(arg)

        handler = arg

        @functools.wraps(handler)
        async def _endpoint(request: Request) -> Any:
            denied = await _check(request)
            if denied is not None:
                return denied
            if inspect.iscoroutinefunction(handler):
                return await handler(request)
            return await run_in_threadpool(handler, request)

        return _endpoint

    return _decorator_or_dependency


__all__ = ["require_access"]
