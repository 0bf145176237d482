"""Tenant repository with slug lookups cached alongside ids."""

from sqlalchemy import or_

from tenancy.core.paging import Page, PageParams
from tenancy.db.models.tenant import Tenant

from .base import CachedRepository


class TenantRepository(CachedRepository[Tenant]):
    """Repository for Tenant rows.

    Cache keys: ``id:{id}`` and ``slug:{slug}``.
    """

    entity_name = "Tenant"

    def cache_keys(self, obj: Tenant) -> list[str]:
        return [f"id:{obj.id}", f"slug:{obj.slug}"]

    async def get_by_slug(self, slug: str) -> Tenant | None:
        return await self.read_through(f"slug:{slug}", Tenant.slug == slug)

    async def get_by_id_or_slug(self, identifier: str) -> Tenant | None:
        """Resolve an identifier that may be either an id or a slug."""
        tenant = await self.get_cached(identifier)
        if tenant is None:
            tenant = await self.get_by_slug(identifier)
        return tenant

    async def get_for_update(self, identifier: str) -> Tenant | None:
        """Load a session-bound row by id or slug, bypassing the cache."""
        return await self.find_one(or_(Tenant.id == identifier, Tenant.slug == identifier))

    async def slug_exists(self, slug: str) -> bool:
        return await self.count(Tenant.slug == slug) > 0

    async def list_page(
        self,
        params: PageParams,
        *,
        type: str | None = None,
        disabled: bool | None = None,
    ) -> Page[Tenant]:
        criteria = []
        if type is not None:
            criteria.append(Tenant.type == type)
        if disabled is not None:
            criteria.append(Tenant.disabled.is_(disabled))
        return await self.paginate(params, *criteria)
