"""Quota endpoints.

Tenant scoped routes resolve {tenant} by id or slug. Usage changes go
through /usage so increments stay atomic in the store.
"""

from typing import Annotated

from fastapi import APIRouter, Query, status
from pydantic import BaseModel

from tenancy.api.dependencies import Paging, Quotas, TenantId
from tenancy.api.schemas.envelope import Envelope, ok, paged
from tenancy.db.models.tenant import QuotaType
from tenancy.db.schemas.quota import (
    QuotaCheckRequest,
    QuotaCheckResponse,
    QuotaCreate,
    QuotaRead,
    QuotaUpdate,
    QuotaUsageRequest,
)

router = APIRouter(tags=["quotas"])


class QuotaUsage(BaseModel):
    tenant_id: str
    quota_type: QuotaType
    used: int
    limit: int
    exceeded: bool


@router.get("/tenants/{tenant}/quotas", response_model=Envelope, summary="List tenant quotas")
async def list_quotas(
    tenant_id: TenantId,
    quotas: Quotas,
    paging: Paging,
    quota_type: Annotated[QuotaType | None, Query()] = None,
) -> Envelope:
    return paged(await quotas.list_quotas(paging, tenant_id=tenant_id, quota_type=quota_type))


@router.post(
    "/tenants/{tenant}/quotas",
    response_model=Envelope[QuotaRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create a quota",
)
async def create_quota(
    tenant_id: TenantId, body: QuotaCreate, quotas: Quotas
) -> Envelope[QuotaRead]:
    return ok(await quotas.create(body.model_copy(update={"tenant_id": tenant_id})))


@router.post(
    "/tenants/{tenant}/quotas/check",
    response_model=Envelope[QuotaCheckResponse],
    summary="Check whether an amount fits the quota",
)
async def check_quota(
    tenant_id: TenantId, body: QuotaCheckRequest, quotas: Quotas
) -> Envelope[QuotaCheckResponse]:
    allowed = await quotas.check_quota_limit(tenant_id, body.quota_type, body.amount)
    return ok(
        QuotaCheckResponse(
            tenant_id=tenant_id,
            quota_type=body.quota_type,
            amount=body.amount,
            allowed=allowed,
        )
    )


@router.get(
    "/tenants/{tenant}/quotas/usage",
    response_model=Envelope[QuotaUsage],
    summary="Current usage and ceiling for one quota type",
)
async def get_usage(
    tenant_id: TenantId,
    quotas: Quotas,
    quota_type: Annotated[QuotaType, Query()] = QuotaType.STORAGE,
) -> Envelope[QuotaUsage]:
    return ok(
        QuotaUsage(
            tenant_id=tenant_id,
            quota_type=quota_type,
            used=await quotas.get_usage(tenant_id, quota_type),
            limit=await quotas.get_quota(tenant_id, quota_type),
            exceeded=await quotas.is_quota_exceeded(tenant_id, quota_type),
        )
    )


@router.post(
    "/tenants/{tenant}/quotas/usage",
    response_model=Envelope[QuotaRead],
    summary="Apply a usage delta",
)
async def update_usage(
    tenant_id: TenantId, body: QuotaUsageRequest, quotas: Quotas
) -> Envelope[QuotaRead]:
    return ok(await quotas.update_usage(tenant_id, body.quota_type, body.delta))


@router.get(
    "/tenants/{tenant}/quotas/summary",
    response_model=Envelope[list[QuotaRead]],
    summary="Every quota of the tenant",
)
async def quota_summary(tenant_id: TenantId, quotas: Quotas) -> Envelope[list[QuotaRead]]:
    return ok(await quotas.get_tenant_quota_summary(tenant_id))


@router.get("/quotas/{quota_id}", response_model=Envelope[QuotaRead], summary="Get a quota")
async def get_quota(quota_id: str, quotas: Quotas) -> Envelope[QuotaRead]:
    return ok(await quotas.get(quota_id))


@router.put("/quotas/{quota_id}", response_model=Envelope[QuotaRead], summary="Update a quota")
async def update_quota(quota_id: str, body: QuotaUpdate, quotas: Quotas) -> Envelope[QuotaRead]:
    return ok(await quotas.update(quota_id, body))


@router.delete("/quotas/{quota_id}", response_model=Envelope, summary="Delete a quota")
async def delete_quota(quota_id: str, quotas: Quotas) -> Envelope:
    await quotas.delete(quota_id)
    return ok()
