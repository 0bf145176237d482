"""Request context for async-safe tenant and actor propagation.

The context travels through async call chains via contextvars. Services
read the actor from it to stamp created_by/updated_by on writes, and the
logging processors read it to annotate log entries.

Usage:
    from tenancy.core.context import create_context, request_context

    with request_context(create_context(actor_id="u-1", tenant_id="t-1")):
        await service.create(body)
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field
from uuid_utils import uuid7

from tenancy.core.exceptions import ContextNotSetError


def _new_id() -> str:
    return str(uuid7())


class ActorType(str, Enum):
    """Type of actor performing the operation."""

    HUMAN = "human"
    SERVICE = "service"
    SYSTEM = "system"


class RequestContext(BaseModel):
    """Context for a single request or background operation."""

    request_id: str = Field(default_factory=_new_id)
    correlation_id: str = Field(default_factory=_new_id)
    tenant_id: str | None = None
    actor_id: str | None = None
    actor_type: ActorType = ActorType.HUMAN
    initiated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def to_log_dict(self) -> dict[str, Any]:
        """Context fields suitable for structured log entries."""
        return {
            "request_id": self.request_id,
            "correlation_id": self.correlation_id,
            "tenant_id": self.tenant_id,
            "actor_id": self.actor_id,
            "actor_type": self.actor_type.value,
        }


_request_context: ContextVar[RequestContext | None] = ContextVar("request_context", default=None)


def get_current_context() -> RequestContext:
    """Get the current request context.

    Raises:
        ContextNotSetError: If no context is set in the current execution context
    """
    ctx = _request_context.get()
    if ctx is None:
        raise ContextNotSetError(
            "No request context is set. Use request_context() context manager."
        )
    return ctx


def get_current_context_or_none() -> RequestContext | None:
    """Get the current request context, or None if not set."""
    return _request_context.get()


def get_current_actor_id() -> str | None:
    """Actor of the current context, used for provenance columns."""
    ctx = _request_context.get()
    return ctx.actor_id if ctx is not None else None


def set_context(ctx: RequestContext) -> Token[RequestContext | None]:
    """Set the request context and return a token for restoration."""
    return _request_context.set(ctx)


def reset_context(token: Token[RequestContext | None]) -> None:
    """Reset the context to its previous value using a token."""
    _request_context.reset(token)


@contextmanager
def request_context(ctx: RequestContext):
    """Context manager for setting request context.

    Works for sync and async code because contextvars propagate to tasks
    created inside the block.
    """
    token = set_context(ctx)
    try:
        yield ctx
    finally:
        reset_context(token)


def create_context(
    *,
    tenant_id: str | None = None,
    actor_id: str | None = None,
    actor_type: ActorType = ActorType.HUMAN,
    request_id: str | None = None,
    correlation_id: str | None = None,
) -> RequestContext:
    """Factory function to create a RequestContext with defaults."""
    return RequestContext(
        tenant_id=tenant_id,
        actor_id=actor_id,
        actor_type=actor_type,
        request_id=request_id or _new_id(),
        correlation_id=correlation_id or _new_id(),
    )
