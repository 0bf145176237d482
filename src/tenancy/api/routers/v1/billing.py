"""Billing endpoints."""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Query, status

from tenancy.api.dependencies import Billing, Paging, TenantId
from tenancy.api.schemas.envelope import Envelope, ok, paged
from tenancy.db.models.tenant import BillingPeriod, BillingStatus
from tenancy.db.schemas.billing import (
    BillingCreate,
    BillingRead,
    BillingSummary,
    BillingUpdate,
    InvoiceRequest,
    MarkOverdueResult,
    PaymentRequest,
)

router = APIRouter(tags=["billing"])


@router.get("/tenants/{tenant}/billing", response_model=Envelope, summary="List billing records")
async def list_billing(
    tenant_id: TenantId,
    billing: Billing,
    paging: Paging,
    billing_status: Annotated[BillingStatus | None, Query(alias="status")] = None,
    billing_period: Annotated[BillingPeriod | None, Query()] = None,
) -> Envelope:
    page = await billing.list_billing(
        paging, tenant_id=tenant_id, status=billing_status, billing_period=billing_period
    )
    return paged(page)


@router.post(
    "/tenants/{tenant}/billing",
    response_model=Envelope[BillingRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create a billing record",
)
async def create_billing(
    tenant_id: TenantId, body: BillingCreate, billing: Billing
) -> Envelope[BillingRead]:
    return ok(await billing.create(body.model_copy(update={"tenant_id": tenant_id})))


@router.get(
    "/tenants/{tenant}/billing/summary",
    response_model=Envelope[BillingSummary],
    summary="Totals by status",
)
async def billing_summary(tenant_id: TenantId, billing: Billing) -> Envelope[BillingSummary]:
    return ok(await billing.get_billing_summary(tenant_id))


@router.get(
    "/tenants/{tenant}/billing/overdue",
    response_model=Envelope[list[BillingRead]],
    summary="Overdue billing records",
)
async def overdue_billing(tenant_id: TenantId, billing: Billing) -> Envelope[list[BillingRead]]:
    return ok(await billing.get_overdue_billing(tenant_id))


@router.post(
    "/tenants/{tenant}/billing/invoice",
    response_model=Envelope[BillingRead],
    status_code=status.HTTP_201_CREATED,
    summary="Generate an invoice for the period ending now",
)
async def generate_invoice(
    tenant_id: TenantId, body: InvoiceRequest, billing: Billing
) -> Envelope[BillingRead]:
    return ok(await billing.generate_invoice(tenant_id, body.billing_period))


@router.post(
    "/billing/mark-overdue",
    response_model=Envelope[MarkOverdueResult],
    summary="Sweep pending records past due into overdue",
)
async def mark_overdue(billing: Billing) -> Envelope[MarkOverdueResult]:
    now = datetime.now(UTC)
    updated = await billing.mark_overdue(now)
    return ok(MarkOverdueResult(updated=updated, swept_at=now))


@router.get("/billing/{billing_id}", response_model=Envelope[BillingRead], summary="Get a billing record")
async def get_billing(billing_id: str, billing: Billing) -> Envelope[BillingRead]:
    return ok(await billing.get(billing_id))


@router.put(
    "/billing/{billing_id}", response_model=Envelope[BillingRead], summary="Update a billing record"
)
async def update_billing(
    billing_id: str, body: BillingUpdate, billing: Billing
) -> Envelope[BillingRead]:
    return ok(await billing.update(billing_id, body))


@router.delete("/billing/{billing_id}", response_model=Envelope, summary="Delete a billing record")
async def delete_billing(billing_id: str, billing: Billing) -> Envelope:
    await billing.delete(billing_id)
    return ok()


@router.post(
    "/billing/{billing_id}/pay",
    response_model=Envelope[BillingRead],
    summary="Record a payment",
)
async def pay_billing(
    billing_id: str, body: PaymentRequest, billing: Billing
) -> Envelope[BillingRead]:
    return ok(await billing.process_payment(billing_id, body.payment_method))
