from __future__ import annotations

import logging
import time
from contextvars import ContextVar
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)
principal_ctx_var: ContextVar[str | None] = ContextVar("principal_id", default=None)
role_ctx_var: ContextVar[str | None] = ContextVar("principal_role", default=None)
logger = logging.getLogger("landedcost.request")

# First path segment for the record screens and the JSON API.
_PREFIXES = ("/api/v1/", "/ui/", "/")


def resource_segment(path: str) -> str | None:
    """Return the resource slug a path addresses (``/api/v1/lots/7`` → ``lots``)."""

    for prefix in _PREFIXES:
        if path.startswith(prefix):
            rest = path[len(prefix):]
            segment = rest.split("/", 1)[0]
            return segment or None
    return None


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag every request with a correlation id and log who touched which resource."""

    def __init__(self, app, header_name: str = "X-Request-ID") -> None:  # type: ignore[override]
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(self.header_name) or uuid4().hex
        tokens = (
            request_id_ctx_var.set(request_id),
            principal_ctx_var.set(None),
            role_ctx_var.set(None),
        )
        request.state.request_id = request_id
        start = time.perf_counter()
        try:
            response = await call_next(request)
            # Dependencies may run in another task; request.state is shared with them.
            principal = principal_ctx_var.get() or getattr(request.state, "principal", None)
            role = role_ctx_var.get() or getattr(request.state, "role", None)
        finally:
            role_ctx_var.reset(tokens[2])
            principal_ctx_var.reset(tokens[1])
            request_id_ctx_var.reset(tokens[0])
        elapsed = (time.perf_counter() - start) * 1000
        response.headers[self.header_name] = request_id

        data = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": round(elapsed, 2),
        }
        resource = resource_segment(request.url.path)
        if resource:
            data["resource"] = resource
        if principal:
            data["principal"] = principal
        if role:
            data["role"] = role
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(level, "request.completed", extra={"extra_data": data})
        return response
