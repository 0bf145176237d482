"""Tenant setting repository."""

from tenancy.core.paging import Page, PageParams
from tenancy.db.models.tenant import TenantSetting

from .base import CachedRepository


class SettingRepository(CachedRepository[TenantSetting]):
    """Repository for TenantSetting rows.

    Cache keys: ``id:{id}`` and ``tenant:{tenant_id}:key:{setting_key}``.
    """

    entity_name = "TenantSetting"

    def cache_keys(self, obj: TenantSetting) -> list[str]:
        return [f"id:{obj.id}", f"tenant:{obj.tenant_id}:key:{obj.setting_key}"]

    async def get_by_key(self, tenant_id: str, key: str) -> TenantSetting | None:
        return await self.read_through(
            f"tenant:{tenant_id}:key:{key}",
            TenantSetting.tenant_id == tenant_id,
            TenantSetting.setting_key == key,
        )

    async def get_for_update(self, tenant_id: str, key: str) -> TenantSetting | None:
        return await self.find_one(
            TenantSetting.tenant_id == tenant_id, TenantSetting.setting_key == key
        )

    async def list_by_tenant(
        self, tenant_id: str, *, public_only: bool = False
    ) -> list[TenantSetting]:
        criteria = [TenantSetting.tenant_id == tenant_id]
        if public_only:
            criteria.append(TenantSetting.is_public.is_(True))
        return await self.find_all(*criteria)

    async def list_page(
        self,
        params: PageParams,
        *,
        tenant_id: str | None = None,
        scope: str | None = None,
        category: str | None = None,
        is_public: bool | None = None,
    ) -> Page[TenantSetting]:
        criteria = []
        if tenant_id is not None:
            criteria.append(TenantSetting.tenant_id == tenant_id)
        if scope is not None:
            criteria.append(TenantSetting.scope == scope)
        if category is not None:
            criteria.append(TenantSetting.category == category)
        if is_public is not None:
            criteria.append(TenantSetting.is_public.is_(is_public))
        return await self.paginate(params, *criteria)

    async def delete_all_by_tenant_id(self, tenant_id: str, *, commit: bool = True) -> int:
        rows = await self.list_by_tenant(tenant_id)
        for row in rows:
            await self.delete(row, commit=False)
        if commit:
            await self.db.commit()
        return len(rows)
