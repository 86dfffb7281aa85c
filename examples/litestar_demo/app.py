from __future__ import annotations

import dataclasses
import logging
import logging.config
from pathlib import Path

from litestar import Litestar, get

from authzrules.adapters import request_from_scope
from authzrules.adapters.litestar import AuthzMiddleware
from authzrules.core.engine import Guard
from authzrules.core.model import AccessRequest, ParentRequest, SecurityContext
from authzrules.logging.decision_logger import DecisionLogger
from authzrules.predicates import default_registry
from authzrules.readers import MemoryDataReader
from authzrules.storage import FilePolicySource, HotReloader

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {"default": {"format": "%(asctime)s %(levelname)s %(name)s [%(trace_id)s]: %(message)s"}},
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "default", "filters": ["trace"]}
    },
    "filters": {"trace": {"()": "authzrules.logging.context.TraceIdFilter"}},
    "root": {"level": "INFO", "handlers": ["console"]},
}
logging.config.dictConfig(LOGGING)

rules_path = Path(__file__).with_name("access.json")
source = FilePolicySource(str(rules_path))
reader = MemoryDataReader({"config/ui/configuration": {"configuration": {"selfRegistration": True}}})
guard = Guard(source.load(), default_registry(reader), logger_sink=DecisionLogger(as_json=True))
reloader = HotReloader(guard, source, poll_interval=0.5)


def from_demo_headers(scope) -> AccessRequest:
    # demo only: trust X-Roles / X-User-Id instead of a real authentication layer
    req = request_from_scope(scope)
    headers = dict(scope.get("headers") or [])
    security = SecurityContext(
        username=headers.get(b"x-user-id", b"").decode() or None,
        user_id=headers.get(b"x-user-id", b"").decode() or None,
        roles=tuple(r for r in headers.get(b"x-roles", b"openidm-reg").decode().split(",") if r),
    )
    return dataclasses.replace(req, parent=ParentRequest(type="http", security=security))


@get("/info/ping")
async def ping() -> dict:
    return {"ok": True}


@get("/managed/user/{user_id:str}")
async def read_user(user_id: str) -> dict:
    return {"_id": user_id}


app = Litestar(
    route_handlers=[ping, read_user],
    middleware=[AuthzMiddleware(guard=guard, build_request=from_demo_headers)],
    on_startup=[lambda: reloader.start()],
    on_shutdown=[lambda: reloader.stop()],
)

# Run: uvicorn examples.litestar_demo.app:app --reload
