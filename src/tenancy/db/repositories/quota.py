"""Tenant quota repository."""

from sqlalchemy import case, update

from tenancy.core.context import get_current_actor_id
from tenancy.core.paging import Page, PageParams
from tenancy.db.models.base import utc_now
from tenancy.db.models.tenant import TenantQuota

from .base import CachedRepository


class QuotaRepository(CachedRepository[TenantQuota]):
    """Repository for TenantQuota rows.

    Cache keys: ``id:{id}`` and ``tenant:{tenant_id}:type:{quota_type}``.
    """

    entity_name = "TenantQuota"

    def cache_keys(self, obj: TenantQuota) -> list[str]:
        return [f"id:{obj.id}", f"tenant:{obj.tenant_id}:type:{obj.quota_type}"]

    async def get_by_tenant_and_type(self, tenant_id: str, quota_type: str) -> TenantQuota | None:
        return await self.read_through(
            f"tenant:{tenant_id}:type:{quota_type}",
            TenantQuota.tenant_id == tenant_id,
            TenantQuota.quota_type == quota_type,
        )

    async def get_for_update(self, tenant_id: str, quota_type: str) -> TenantQuota | None:
        return await self.find_one(
            TenantQuota.tenant_id == tenant_id, TenantQuota.quota_type == quota_type
        )

    async def list_by_tenant(self, tenant_id: str) -> list[TenantQuota]:
        return await self.find_all(TenantQuota.tenant_id == tenant_id)

    async def list_page(
        self,
        params: PageParams,
        *,
        tenant_id: str | None = None,
        quota_type: str | None = None,
    ) -> Page[TenantQuota]:
        criteria = []
        if tenant_id is not None:
            criteria.append(TenantQuota.tenant_id == tenant_id)
        if quota_type is not None:
            criteria.append(TenantQuota.quota_type == quota_type)
        return await self.paginate(params, *criteria)

    async def add_usage(self, quota: TenantQuota, delta: int) -> TenantQuota:
        """Apply a usage delta in one UPDATE statement, clamped at zero.

        The new value is computed by the database so concurrent deltas on
        the same row serialize on the row lock instead of overwriting each
        other.
        """
        new_value = TenantQuota.current_used + delta
        stmt = (
            update(TenantQuota)
            .where(TenantQuota.id == quota.id)
            .values(
                current_used=case((new_value < 0, 0), else_=new_value),
                updated_at=utc_now(),
                updated_by=get_current_actor_id(),
            )
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(stmt)
        await self.db.commit()
        await self.db.refresh(quota)
        self.cache.invalidate(*self.cache_keys(quota))
        return quota

    async def delete_all_by_tenant_id(self, tenant_id: str, *, commit: bool = True) -> int:
        rows = await self.list_by_tenant(tenant_id)
        for row in rows:
            await self.delete(row, commit=False)
        if commit:
            await self.db.commit()
        return len(rows)
