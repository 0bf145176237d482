"""Error handling middleware for mapping exceptions to HTTP responses."""

from datetime import UTC, datetime
from typing import Any, Callable

import structlog
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.middleware.base import BaseHTTPMiddleware

from tenancy.api.schemas.errors import APIError, ErrorCode
from tenancy.core.exceptions import (
    AlreadyExistsError,
    AlreadyInitializedError,
    AuthenticationError,
    FieldInvalidError,
    FieldRequiredError,
    InitializationStepError,
    NotFoundError,
    NotSingularError,
    PaymentNotAllowedError,
    ReinitializationNotAllowedError,
    SettingReadOnlyError,
)

logger = structlog.get_logger()

# Rejected because of the current state of a record rather than the request body
CONFLICT_ERRORS = (
    PaymentNotAllowedError,
    SettingReadOnlyError,
    AlreadyInitializedError,
    ReinitializationNotAllowedError,
)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Catches exceptions and returns APIError responses.

    Domain errors map to 4xx codes; anything unmapped is logged and
    returned as a 500 internal_error.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return self._handle_exception(request, exc)

    def _handle_exception(self, request: Request, exc: Exception) -> JSONResponse:
        request_id = str(getattr(request.state, "request_id", "unknown"))
        status_code, error_code, message, details = self._map_exception(exc, request)
        if status_code >= 500:
            logger.error(
                "request_failed",
                path=request.url.path,
                error_type=type(exc).__name__,
                error=str(exc),
                request_id=request_id,
            )

        error = APIError(
            error_code=error_code,
            message=message,
            details=details,
            request_id=request_id,
            timestamp=datetime.now(UTC),
        )
        return JSONResponse(
            status_code=status_code,
            content=error.model_dump(mode="json"),
            headers={"X-Request-ID": request_id},
        )

    def _map_exception(
        self, exc: Exception, request: Request
    ) -> tuple[int, str, str, dict[str, Any] | None]:
        """Map exception to (status_code, error_code, message, details)."""
        if isinstance(exc, AuthenticationError):
            return 401, ErrorCode.UNAUTHORIZED.value, str(exc), None

        if isinstance(exc, FieldRequiredError):
            return 400, ErrorCode.INVALID_REQUEST.value, str(exc), {"field": exc.field}

        if isinstance(exc, FieldInvalidError):
            return (
                400,
                ErrorCode.INVALID_REQUEST.value,
                str(exc),
                {"field": exc.field, "value": str(exc.value), "reason": exc.reason},
            )

        if isinstance(exc, ValidationError):
            return (
                422,
                ErrorCode.VALIDATION_ERROR.value,
                "Request validation failed",
                {"errors": exc.errors(include_url=False, include_context=False)},
            )

        if isinstance(exc, NotFoundError):
            return (
                404,
                ErrorCode.NOT_FOUND.value,
                str(exc),
                {"entity": exc.entity, "key": str(exc.key)},
            )

        if isinstance(exc, AlreadyExistsError):
            return (
                409,
                ErrorCode.ALREADY_EXISTS.value,
                str(exc),
                {"entity": exc.entity, "key": str(exc.key)},
            )

        if isinstance(exc, CONFLICT_ERRORS):
            return 409, ErrorCode.CONFLICT.value, str(exc), None

        if isinstance(exc, InitializationStepError):
            return (
                500,
                ErrorCode.INITIALIZATION_FAILED.value,
                str(exc),
                {"step": exc.step},
            )

        if isinstance(exc, NotSingularError):
            return 500, ErrorCode.INTERNAL_ERROR.value, str(exc), None

        return (
            500,
            ErrorCode.INTERNAL_ERROR.value,
            "Internal server error",
            {"type": type(exc).__name__} if self._is_debug(request) else None,
        )

    def _is_debug(self, request: Request) -> bool:
        settings = getattr(request.app.state, "settings", None)
        return bool(settings is not None and settings.DEBUG)
