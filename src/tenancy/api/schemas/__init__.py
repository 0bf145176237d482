"""API schemas."""

from .envelope import Envelope, PageData, ok, paged
from .errors import APIError, ErrorCode
from .health import ComponentHealth, HealthDetailResponse, HealthResponse, HealthStatus

__all__ = [
    "APIError",
    "ComponentHealth",
    "Envelope",
    "ErrorCode",
    "HealthDetailResponse",
    "HealthResponse",
    "HealthStatus",
    "PageData",
    "ok",
    "paged",
]
