"""Request context middleware for propagating context through the request lifecycle."""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from tenancy.core.context import ActorType, create_context, request_context

SKIP_CONTEXT_PATHS = {
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
}


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Runs each request inside a RequestContext.

    The tenant comes from X-Tenant-ID and the actor from the state the
    authentication middleware set. A caller-supplied X-Request-ID is kept
    so traces line up across services.

    Sets:
        request.state.request_id: The request id
        X-Request-ID and X-Correlation-ID response headers
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        ctx = create_context(
            tenant_id=request.headers.get("X-Tenant-ID") or None,
            actor_id=getattr(request.state, "actor_id", None),
            actor_type=getattr(request.state, "actor_type", ActorType.SYSTEM),
            request_id=request.headers.get("X-Request-ID") or None,
            correlation_id=request.headers.get("X-Correlation-ID") or None,
        )
        request.state.request_id = ctx.request_id
        request.state.tenant_id = ctx.tenant_id

        if self._should_skip_context(request.url.path):
            response = await call_next(request)
            response.headers["X-Request-ID"] = ctx.request_id
            return response

        with request_context(ctx):
            response = await call_next(request)

        response.headers["X-Request-ID"] = ctx.request_id
        response.headers["X-Correlation-ID"] = ctx.correlation_id
        return response

    def _should_skip_context(self, path: str) -> bool:
        return path in SKIP_CONTEXT_PATHS or path.startswith(("/docs", "/redoc"))
