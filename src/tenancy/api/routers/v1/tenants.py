"""Tenant endpoints.

- GET/POST /tenants
- GET/PUT/DELETE /tenants/{tenant} (id or slug)
- GET /users/{user}/tenants and /users/{user}/tenant
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Query, status

from tenancy.api.dependencies import Paging, Tenants
from tenancy.api.schemas.envelope import Envelope, ok, paged
from tenancy.db.schemas.tenant import TenantCreate, TenantRead, TenantUpdate

logger = structlog.get_logger()

router = APIRouter(tags=["tenants"])


@router.get("/tenants", response_model=Envelope, summary="List tenants")
async def list_tenants(
    tenants: Tenants,
    paging: Paging,
    type: Annotated[str | None, Query(max_length=50)] = None,
    disabled: Annotated[bool | None, Query()] = None,
) -> Envelope:
    page = await tenants.list_tenants(paging, type=type, disabled=disabled)
    return paged(page)


@router.post(
    "/tenants",
    response_model=Envelope[TenantRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create a tenant",
)
async def create_tenant(body: TenantCreate, tenants: Tenants) -> Envelope[TenantRead]:
    tenant = await tenants.create(body)
    logger.info("tenant_create_request", tenant_id=tenant.id)
    return ok(tenant)


@router.get("/tenants/{tenant}", response_model=Envelope[TenantRead], summary="Get a tenant")
async def get_tenant(tenant: str, tenants: Tenants) -> Envelope[TenantRead]:
    return ok(await tenants.get(tenant))


@router.put("/tenants/{tenant}", response_model=Envelope[TenantRead], summary="Update a tenant")
async def update_tenant(tenant: str, body: TenantUpdate, tenants: Tenants) -> Envelope[TenantRead]:
    return ok(await tenants.update(tenant, body))


@router.delete("/tenants/{tenant}", response_model=Envelope, summary="Delete a tenant")
async def delete_tenant(tenant: str, tenants: Tenants) -> Envelope:
    """Delete the tenant with its quotas, billing, settings and bindings."""
    await tenants.delete(tenant)
    return ok()


@router.get(
    "/users/{user}/tenants",
    response_model=Envelope[list[TenantRead]],
    summary="Tenants a user belongs to",
)
async def list_user_tenants(user: str, tenants: Tenants) -> Envelope[list[TenantRead]]:
    return ok(await tenants.list_by_user(user))


@router.get(
    "/users/{user}/tenant",
    response_model=Envelope[TenantRead],
    summary="First tenant a user was bound to",
)
async def get_user_tenant(user: str, tenants: Tenants) -> Envelope[TenantRead]:
    return ok(await tenants.get_by_user(user))
