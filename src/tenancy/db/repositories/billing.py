"""Tenant billing repository."""

from datetime import datetime

from sqlalchemy import select, update

from tenancy.core.context import get_current_actor_id
from tenancy.core.paging import Page, PageParams
from tenancy.db.models.base import utc_now
from tenancy.db.models.tenant import BillingStatus, TenantBilling

from .base import CachedRepository


class BillingRepository(CachedRepository[TenantBilling]):
    """Repository for TenantBilling rows.

    Cache keys: ``id:{id}`` and ``invoice:{invoice_number}``.
    """

    entity_name = "TenantBilling"

    def cache_keys(self, obj: TenantBilling) -> list[str]:
        return [f"id:{obj.id}", f"invoice:{obj.invoice_number}"]

    async def get_by_invoice_number(self, invoice_number: str) -> TenantBilling | None:
        return await self.read_through(
            f"invoice:{invoice_number}", TenantBilling.invoice_number == invoice_number
        )

    async def list_by_tenant(self, tenant_id: str) -> list[TenantBilling]:
        return await self.find_all(TenantBilling.tenant_id == tenant_id)

    async def list_overdue(self, tenant_id: str) -> list[TenantBilling]:
        """Rows the overdue sweep has flagged for tenant_id."""
        return await self.find_all(
            TenantBilling.tenant_id == tenant_id,
            TenantBilling.status == BillingStatus.OVERDUE.value,
        )

    async def list_page(
        self,
        params: PageParams,
        *,
        tenant_id: str | None = None,
        status: str | None = None,
        billing_period: str | None = None,
    ) -> Page[TenantBilling]:
        criteria = []
        if tenant_id is not None:
            criteria.append(TenantBilling.tenant_id == tenant_id)
        if status is not None:
            criteria.append(TenantBilling.status == status)
        if billing_period is not None:
            criteria.append(TenantBilling.billing_period == billing_period)
        return await self.paginate(params, *criteria)

    async def mark_overdue(self, now: datetime) -> int:
        """Flip every pending row with due_date before now to overdue.

        Returns:
            Number of rows transitioned
        """
        pending_past_due = (
            TenantBilling.status == BillingStatus.PENDING.value,
            TenantBilling.due_date.is_not(None),
            TenantBilling.due_date < now,
        )
        result = await self.db.execute(
            select(TenantBilling.id, TenantBilling.invoice_number).where(*pending_past_due)
        )
        targets = result.all()
        if not targets:
            return 0

        stmt = (
            update(TenantBilling)
            .where(TenantBilling.id.in_([row.id for row in targets]), *pending_past_due)
            .values(
                status=BillingStatus.OVERDUE.value,
                updated_at=utc_now(),
                updated_by=get_current_actor_id(),
            )
            .execution_options(synchronize_session="fetch")
        )
        outcome = await self.db.execute(stmt)
        await self.db.commit()

        keys = [key for row in targets for key in (f"id:{row.id}", f"invoice:{row.invoice_number}")]
        self.cache.invalidate(*keys)
        return outcome.rowcount

    async def delete_all_by_tenant_id(self, tenant_id: str, *, commit: bool = True) -> int:
        rows = await self.list_by_tenant(tenant_id)
        for row in rows:
            await self.delete(row, commit=False)
        if commit:
            await self.db.commit()
        return len(rows)
