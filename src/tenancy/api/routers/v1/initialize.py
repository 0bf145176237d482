"""System initialization endpoints."""

import structlog
from fastapi import APIRouter

from tenancy.api.dependencies import Initializer
from tenancy.api.schemas.envelope import Envelope, ok
from tenancy.db.schemas.initialize import InitializeRequest, InitState

logger = structlog.get_logger()

router = APIRouter(prefix="/sys/initialize", tags=["system"])


@router.get("", response_model=Envelope[InitState], summary="Initialization state")
async def initialization_status(initializer: Initializer) -> Envelope[InitState]:
    state = await initializer.get_state()
    state.is_initialized = await initializer.is_initialized(state)
    return ok(state)


@router.post("", response_model=Envelope[InitState], summary="Run the seed sequence")
async def initialize_system(
    initializer: Initializer, body: InitializeRequest | None = None
) -> Envelope[InitState]:
    """Seed roles, permissions, the default tenant, users, menus, policies and organization.

    Returns 409 when the system is already initialized and reinitialization
    is not allowed.
    """
    allow = body.allow_reinitialization if body is not None else None
    state = await initializer.execute(allow_reinitialization=allow)
    logger.info("system_initialized", steps=len(state.statuses))
    return ok(state)


@router.post("/reset", response_model=Envelope[InitState], summary="Clear the initialization state")
async def reset_initialization(initializer: Initializer) -> Envelope[InitState]:
    return ok(await initializer.reset_initialization())
