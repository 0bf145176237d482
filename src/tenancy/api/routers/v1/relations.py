"""Tenant binding endpoints for groups, menus, dictionaries and options."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status

from tenancy.api.dependencies import (
    Groups,
    TenantId,
    get_dictionary_service,
    get_menu_service,
    get_option_service,
)
from tenancy.api.schemas.envelope import Envelope, ok, paged
from tenancy.core.paging import Page
from tenancy.db.schemas.relations import GroupBind, RelationCreate, RelationRead, TenantGroupRelation
from tenancy.services import TenantRelationService

router = APIRouter(tags=["tenant-relations"])


@router.get("/tenants/{tenant}/groups", response_model=Envelope, summary="Groups bound to a tenant")
async def list_groups(
    tenant_id: TenantId,
    groups: Groups,
    parent: Annotated[str | None, Query(description="Parent group id; root groups when empty")] = None,
) -> Envelope:
    return paged(await groups.get_tenant_groups(tenant_id, parent=parent))


@router.post(
    "/tenants/{tenant}/groups",
    response_model=Envelope[TenantGroupRelation],
    status_code=status.HTTP_201_CREATED,
    summary="Bind a group to a tenant",
)
async def add_group(
    tenant_id: TenantId, body: GroupBind, groups: Groups
) -> Envelope[TenantGroupRelation]:
    return ok(await groups.add_group_to_tenant(tenant_id, body.group_id))


@router.get("/tenants/{tenant}/groups/{group}", response_model=Envelope, summary="Is the group bound")
async def has_group(tenant_id: TenantId, group: str, groups: Groups) -> Envelope:
    bound = await groups.is_group_in_tenant(tenant_id, group)
    return ok({"tenant_id": tenant_id, "group_id": group, "bound": bound})


@router.delete("/tenants/{tenant}/groups/{group}", response_model=Envelope, summary="Unbind a group")
async def remove_group(tenant_id: TenantId, group: str, groups: Groups) -> Envelope:
    await groups.remove_group_from_tenant(tenant_id, group)
    return ok()


@router.get(
    "/groups/{group}/tenants",
    response_model=Envelope[list[str]],
    summary="Tenant ids a group is bound to",
)
async def group_tenants(group: str, groups: Groups) -> Envelope[list[str]]:
    return ok(await groups.get_group_tenants(group))


def _relation_router(segment: str, provider: Any, tag: str) -> APIRouter:
    """CRUD-less binding routes for one relation kind under /tenants/{tenant}/{segment}."""
    relations = APIRouter(prefix=f"/tenants/{{tenant}}/{segment}", tags=[tag])
    Service = Annotated[TenantRelationService, Depends(provider)]

    @relations.get("", response_model=Envelope, summary=f"List bound {segment}")
    async def list_bound(tenant_id: TenantId, service: Service) -> Envelope:
        ids = await service.get_ids_by_tenant(tenant_id)
        return paged(Page(items=ids, total=len(ids)))

    @relations.post(
        "",
        response_model=Envelope[RelationRead],
        status_code=status.HTTP_201_CREATED,
        summary=f"Bind to tenant ({segment})",
    )
    async def bind(
        tenant_id: TenantId, body: RelationCreate, service: Service
    ) -> Envelope[RelationRead]:
        return ok(await service.add(tenant_id, body.related_id))

    @relations.get("/{related_id}", response_model=Envelope, summary=f"Is bound ({segment})")
    async def is_bound(tenant_id: TenantId, related_id: str, service: Service) -> Envelope:
        bound = await service.exists(tenant_id, related_id)
        return ok({"tenant_id": tenant_id, "related_id": related_id, "bound": bound})

    @relations.delete("/{related_id}", response_model=Envelope, summary=f"Unbind ({segment})")
    async def unbind(tenant_id: TenantId, related_id: str, service: Service) -> Envelope:
        await service.remove(tenant_id, related_id)
        return ok()

    return relations


router.include_router(_relation_router("menus", get_menu_service, "tenant-menus"))
router.include_router(_relation_router("dictionaries", get_dictionary_service, "tenant-dictionaries"))
router.include_router(_relation_router("options", get_option_service, "tenant-options"))
