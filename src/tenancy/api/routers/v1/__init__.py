"""API v1 routers."""

from fastapi import APIRouter

from .billing import router as billing_router
from .initialize import router as initialize_router
from .quotas import router as quotas_router
from .relations import router as relations_router
from .settings import router as settings_router
from .tenants import router as tenants_router
from .users import router as users_router

router = APIRouter()

router.include_router(tenants_router)
router.include_router(quotas_router)
router.include_router(billing_router)
router.include_router(settings_router)
router.include_router(relations_router)
router.include_router(users_router)
router.include_router(initialize_router)

__all__ = [
    "billing_router",
    "initialize_router",
    "quotas_router",
    "relations_router",
    "router",
    "settings_router",
    "tenants_router",
    "users_router",
]
