"""Bearer token authentication for the v1 API."""

import hmac
import re
from datetime import UTC, datetime
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from tenancy.api.schemas.errors import APIError, ErrorCode
from tenancy.config.settings import Settings, get_settings
from tenancy.core.context import ActorType

SKIP_AUTH_PATHS = {
    "/health",
    "/health/db",
    "/health/ready",
    "/docs",
    "/redoc",
    "/openapi.json",
}

SKIP_AUTH_PREFIXES = ("/docs", "/redoc")

BEARER_PATTERN = re.compile(r"^Bearer\s+(.+)$", re.IGNORECASE)


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """Validates the Bearer token and records the calling actor.

    The token is compared to API_SECRET_KEY. The acting user is whatever
    the caller names in X-User-ID; it is only used for provenance columns.

    Sets:
        request.state.actor_id: Value of X-User-ID, or None
        request.state.actor_type: SERVICE for authenticated calls, SYSTEM otherwise
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if self._should_skip_auth(request.url.path):
            request.state.actor_id = None
            request.state.actor_type = ActorType.SYSTEM
            return await call_next(request)

        auth_header = request.headers.get("Authorization")
        if not auth_header:
            return self._unauthorized_response("Missing Authorization header")

        match = BEARER_PATTERN.match(auth_header)
        if not match:
            return self._unauthorized_response("Invalid Authorization header format")

        if not self._validate_token(match.group(1), self._settings(request)):
            return self._unauthorized_response("Invalid API key")

        request.state.actor_id = request.headers.get("X-User-ID") or None
        request.state.actor_type = ActorType.SERVICE
        return await call_next(request)

    def _should_skip_auth(self, path: str) -> bool:
        return path in SKIP_AUTH_PATHS or path.startswith(SKIP_AUTH_PREFIXES)

    def _settings(self, request: Request) -> Settings:
        return getattr(request.app.state, "settings", None) or get_settings()

    def _validate_token(self, token: str, settings: Settings) -> bool:
        """Compare token with the configured secret.

        Without a configured secret any non-empty token is accepted in
        DEBUG mode and every token is rejected otherwise.
        """
        if settings.API_SECRET_KEY is None:
            return bool(token) and settings.DEBUG
        return hmac.compare_digest(token, settings.API_SECRET_KEY.get_secret_value())

    def _unauthorized_response(self, message: str) -> JSONResponse:
        error = APIError(
            error_code=ErrorCode.UNAUTHORIZED.value,
            message=message,
            details=None,
            request_id="unknown",
            timestamp=datetime.now(UTC),
        )
        return JSONResponse(
            status_code=401,
            content=error.model_dump(mode="json"),
            headers={"WWW-Authenticate": "Bearer"},
        )
