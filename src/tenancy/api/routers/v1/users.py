"""Tenant membership and per-tenant role endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query, status

from tenancy.api.dependencies import TenantId, UserTenantRoles, UserTenants
from tenancy.api.schemas.envelope import Envelope, ok, paged
from tenancy.core.paging import Page
from tenancy.db.schemas.relations import UserTenantBind, UserTenantRead
from tenancy.db.schemas.user_tenant_role import (
    BulkRoleUpdateRequest,
    BulkRoleUpdateResult,
    RoleChange,
    RoleGrant,
    TenantUserRoles,
    UserTenantRoleRead,
)

router = APIRouter(prefix="/tenants/{tenant}/users", tags=["tenant-users"])


@router.get("", response_model=Envelope, summary="Users of a tenant with their roles")
async def list_users(
    tenant_id: TenantId,
    roles: UserTenantRoles,
    role_id: Annotated[str | None, Query()] = None,
) -> Envelope:
    users = await roles.list_tenant_users(tenant_id, role_id)
    return paged(Page(items=users, total=len(users)))


@router.post(
    "",
    response_model=Envelope[UserTenantRead],
    status_code=status.HTTP_201_CREATED,
    summary="Add a user to a tenant",
)
async def bind_user(
    tenant_id: TenantId, body: UserTenantBind, members: UserTenants
) -> Envelope[UserTenantRead]:
    return ok(await members.bind(body.user_id, tenant_id))


@router.post(
    "/roles/bulk",
    response_model=Envelope[BulkRoleUpdateResult],
    summary="Apply add, remove and update role operations",
)
async def bulk_update_roles(
    tenant_id: TenantId, body: BulkRoleUpdateRequest, roles: UserTenantRoles
) -> Envelope[BulkRoleUpdateResult]:
    return ok(await roles.bulk_update_user_tenant_roles(tenant_id, body.updates))


@router.delete("/{user}", response_model=Envelope, summary="Remove a user from a tenant")
async def unbind_user(tenant_id: TenantId, user: str, members: UserTenants) -> Envelope:
    await members.unbind(user, tenant_id)
    return ok()


@router.get(
    "/{user}/roles",
    response_model=Envelope[TenantUserRoles],
    summary="Role ids a user holds in a tenant",
)
async def user_roles(
    tenant_id: TenantId, user: str, roles: UserTenantRoles
) -> Envelope[TenantUserRoles]:
    role_ids = await roles.get_user_roles_in_tenant(user, tenant_id)
    return ok(TenantUserRoles(user_id=user, tenant_id=tenant_id, role_ids=role_ids))


@router.post(
    "/{user}/roles",
    response_model=Envelope[UserTenantRoleRead],
    status_code=status.HTTP_201_CREATED,
    summary="Grant a role",
)
async def grant_role(
    tenant_id: TenantId, user: str, body: RoleGrant, roles: UserTenantRoles
) -> Envelope[UserTenantRoleRead]:
    return ok(await roles.add_role_to_user_in_tenant(user, tenant_id, body.role_id))


@router.put("/{user}/roles", response_model=Envelope, summary="Replace one role with another")
async def change_role(
    tenant_id: TenantId, user: str, body: RoleChange, roles: UserTenantRoles
) -> Envelope:
    return ok(
        await roles.update_user_tenant_role(user, tenant_id, body.old_role_id, body.new_role_id)
    )


@router.delete("/{user}/roles/{role}", response_model=Envelope, summary="Revoke a role")
async def revoke_role(
    tenant_id: TenantId, user: str, role: str, roles: UserTenantRoles
) -> Envelope:
    await roles.remove_role_from_user_in_tenant(user, tenant_id, role)
    return ok()
