from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable, Mapping, MutableMapping, Optional
from urllib.parse import parse_qsl

from ..core.model import AccessRequest, ParentRequest, SecurityContext

# The host's authentication layer stores the caller here: a SecurityContext or a
# mapping with username, user_id and roles.
SECURITY_SCOPE_KEY = "authzrules.security"

DENIED_STATUS = 403
DENIED_BODY = {"detail": "Access denied"}

RequestBuilder = Callable[[Any], AccessRequest]

_QUERY_PARAMS = ("_queryId", "_queryFilter", "_queryExpression")

logger = logging.getLogger("authzrules.adapters")


def operation_for(http_method: str, params: Mapping[str, Any]) -> str:
    """Map an HTTP verb onto the resource operation it performs."""
    verb = http_method.upper()
    if verb in ("GET", "HEAD"):
        if any(p in params for p in _QUERY_PARAMS):
            return "query"
        return "read"
    if verb == "POST":
        return "action" if "_action" in params else "create"
    if verb == "PUT":
        return "update"
    if verb == "PATCH":
        return "patch"
    if verb == "DELETE":
        return "delete"
    return verb.lower()


def _roles_from(raw: Any) -> tuple[str, ...]:
    if isinstance(raw, str):
        return tuple(r.strip() for r in raw.split(",") if r.strip())
    if isinstance(raw, (list, tuple, set, frozenset)):
        return tuple(r for r in raw if isinstance(r, str) and r)
    return ()


def security_from(raw: Any) -> Optional[SecurityContext]:
    """Turn what the authentication layer stored in the scope into a SecurityContext.

    Only an absent value means "no caller". A mapping is coerced (``username``,
    ``user_id``/``userId``, ``roles``); anything else is logged and becomes a
    caller without roles, so the rules still decide.
    """
    if raw is None or isinstance(raw, SecurityContext):
        return raw
    if isinstance(raw, Mapping):
        user_id = raw.get("user_id", raw.get("userId"))
        username = raw.get("username")
        return SecurityContext(
            username=username if isinstance(username, str) else None,
            user_id=user_id if isinstance(user_id, str) else None,
            roles=_roles_from(raw.get("roles")),
        )
    logger.warning(
        "authzrules: unrecognised security object %s in scope; evaluating without roles",
        type(raw).__name__,
    )
    return SecurityContext()


def request_from_scope(scope: Mapping[str, Any]) -> AccessRequest:
    """Build an AccessRequest from an ASGI HTTP scope.

    The resource id is the path without its leading slash.
    """
    raw_qs = scope.get("query_string", b"") or b""
    params = dict(parse_qsl(raw_qs.decode("latin-1"), keep_blank_values=True))
    security = security_from(scope.get(SECURITY_SCOPE_KEY))
    return AccessRequest(
        id=str(scope.get("path", "")).lstrip("/"),
        method=operation_for(str(scope.get("method", "GET")), params),
        params=params,
        parent=ParentRequest(type="http", security=security),
    )


def trace_id_from_headers(headers: Any) -> Optional[str]:
    """Return the X-Request-ID header from ASGI raw headers, if any."""
    for name, value in headers or ():
        if name.lower() == b"x-request-id":
            return value.decode("latin-1")
    return None


async def send_denied(send: Callable[[MutableMapping[str, Any]], Awaitable[None]]) -> None:
    """Write the generic 403 answer straight to an ASGI ``send``."""
    body = json.dumps(DENIED_BODY).encode("utf-8")
    await send(
        {
            "type": "http.response.start",
            "status": DENIED_STATUS,
            "headers": [
                (b"content-type", b"application/json"),
                (b"content-length", str(len(body)).encode("ascii")),
            ],
        }
    )
    await send({"type": "http.response.body", "body": body})


__all__ = [
    "SECURITY_SCOPE_KEY",
    "DENIED_STATUS",
    "DENIED_BODY",
    "RequestBuilder",
    "operation_for",
    "request_from_scope",
    "security_from",
    "trace_id_from_headers",
    "send_denied",
]
