"""FastAPI dependencies for API endpoints.

Services are built per request from the request's database session, the
shared Redis client and the cache task runner on app.state.
"""

from typing import Annotated

from fastapi import Depends, Query, Request
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.config.settings import Settings, get_settings
from tenancy.core.cache import CacheTaskRunner, get_task_runner
from tenancy.core.context import RequestContext, get_current_context
from tenancy.core.paging import Direction, PageParams
from tenancy.core.redis import get_redis_client
from tenancy.db.config import get_db
from tenancy.initialize import SystemInitializer
from tenancy.services import (
    BillingService,
    QuotaService,
    RepositoryGroupLookup,
    SettingService,
    TenantDictionaryService,
    TenantGroupService,
    TenantMenuService,
    TenantOptionService,
    TenantService,
    UserTenantRoleService,
    UserTenantService,
)

__all__ = [
    "get_app_settings",
    "get_cache_runner",
    "get_db",
    "get_page_params",
    "get_redis",
    "get_request_context",
    "get_request_id",
    "resolve_tenant_id",
]


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return getattr(request.app.state, "settings", None) or get_settings()


def get_cache_runner(request: Request) -> CacheTaskRunner:
    """Runner drained on shutdown; the process runner when the app has none."""
    return getattr(request.app.state, "cache_runner", None) or get_task_runner()


async def get_redis() -> Redis:
    return await get_redis_client()


def get_request_context() -> RequestContext:
    """Get the current request context set by RequestContextMiddleware.

    Raises:
        ContextNotSetError: If middleware hasn't set the context
    """
    return get_current_context()


def get_request_id(request: Request) -> str:
    return str(getattr(request.state, "request_id", "unknown"))


def get_page_params(
    cursor: Annotated[str | None, Query(description="Opaque cursor from a previous page")] = None,
    limit: Annotated[int, Query(ge=0, description="Page size; 0 uses the default")] = 0,
    direction: Annotated[Direction, Query()] = Direction.FORWARD,
) -> PageParams:
    return PageParams(cursor=cursor, limit=limit, direction=direction)


DbSession = Annotated[AsyncSession, Depends(get_db)]
RedisClient = Annotated[Redis, Depends(get_redis)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
Runner = Annotated[CacheTaskRunner, Depends(get_cache_runner)]
Paging = Annotated[PageParams, Depends(get_page_params)]


def get_tenant_service(
    db: DbSession, redis: RedisClient, settings: AppSettings, runner: Runner
) -> TenantService:
    return TenantService(db, redis, settings=settings, runner=runner)


def get_quota_service(
    db: DbSession, redis: RedisClient, settings: AppSettings, runner: Runner
) -> QuotaService:
    return QuotaService(db, redis, settings=settings, runner=runner)


def get_billing_service(
    db: DbSession, redis: RedisClient, settings: AppSettings, runner: Runner
) -> BillingService:
    return BillingService(db, redis, settings=settings, runner=runner)


def get_setting_service(
    db: DbSession, redis: RedisClient, settings: AppSettings, runner: Runner
) -> SettingService:
    return SettingService(db, redis, settings=settings, runner=runner)


def get_group_service(
    db: DbSession, redis: RedisClient, settings: AppSettings, runner: Runner
) -> TenantGroupService:
    return TenantGroupService(
        db, redis, settings=settings, runner=runner, groups=RepositoryGroupLookup(db)
    )


def get_menu_service(
    db: DbSession, redis: RedisClient, settings: AppSettings, runner: Runner
) -> TenantMenuService:
    return TenantMenuService(db, redis, settings=settings, runner=runner)


def get_dictionary_service(
    db: DbSession, redis: RedisClient, settings: AppSettings, runner: Runner
) -> TenantDictionaryService:
    return TenantDictionaryService(db, redis, settings=settings, runner=runner)


def get_option_service(
    db: DbSession, redis: RedisClient, settings: AppSettings, runner: Runner
) -> TenantOptionService:
    return TenantOptionService(db, redis, settings=settings, runner=runner)


def get_user_tenant_service(
    db: DbSession, redis: RedisClient, settings: AppSettings, runner: Runner
) -> UserTenantService:
    return UserTenantService(db, redis, settings=settings, runner=runner)


def get_user_tenant_role_service(
    db: DbSession, redis: RedisClient, settings: AppSettings, runner: Runner
) -> UserTenantRoleService:
    return UserTenantRoleService(db, redis, settings=settings, runner=runner)


def get_initializer(
    db: DbSession, redis: RedisClient, settings: AppSettings, runner: Runner
) -> SystemInitializer:
    return SystemInitializer(db, redis, settings=settings, runner=runner)


Tenants = Annotated[TenantService, Depends(get_tenant_service)]


async def resolve_tenant_id(tenant: str, tenants: Tenants) -> str:
    """Id of the tenant named in the path by id or slug.

    Raises:
        NotFoundError: If no tenant matches
    """
    return (await tenants.get(tenant)).id


TenantId = Annotated[str, Depends(resolve_tenant_id)]
Quotas = Annotated[QuotaService, Depends(get_quota_service)]
Billing = Annotated[BillingService, Depends(get_billing_service)]
TenantSettings = Annotated[SettingService, Depends(get_setting_service)]
Groups = Annotated[TenantGroupService, Depends(get_group_service)]
Menus = Annotated[TenantMenuService, Depends(get_menu_service)]
Dictionaries = Annotated[TenantDictionaryService, Depends(get_dictionary_service)]
Options = Annotated[TenantOptionService, Depends(get_option_service)]
UserTenants = Annotated[UserTenantService, Depends(get_user_tenant_service)]
UserTenantRoles = Annotated[UserTenantRoleService, Depends(get_user_tenant_role_service)]
Initializer = Annotated[SystemInitializer, Depends(get_initializer)]
