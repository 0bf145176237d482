"""Tenant lifecycle service."""

from typing import Any, Protocol

from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.config.settings import Settings
from tenancy.core.cache import CacheTaskRunner
from tenancy.core.exceptions import AlreadyExistsError, FieldInvalidError, FieldRequiredError, NotFoundError
from tenancy.core.logging import get_logger
from tenancy.core.paging import Page, PageParams
from tenancy.db.models.tenant import Tenant
from tenancy.db.repositories import (
    BillingRepository,
    QuotaRepository,
    SettingRepository,
    TenantDictionaryRepository,
    TenantGroupRepository,
    TenantMenuRepository,
    TenantOptionRepository,
    TenantRepository,
    UserTenantRepository,
    UserTenantRoleRepository,
)
from tenancy.db.schemas.tenant import SLUG_PATTERN, TenantCreate, TenantRead, TenantUpdate, slugify

from .base import BaseService

logger = get_logger(__name__)


class SearchIndexer(Protocol):
    """Full-text indexing capability fed on tenant writes."""

    async def index(self, kind: str, doc_id: str, document: dict[str, Any]) -> None:
        """Add or replace a document."""
        ...

    async def delete(self, kind: str, doc_id: str) -> None:
        """Remove a document."""
        ...


class TenantService(BaseService):
    """Service for tenant CRUD and cascading removal.

    Search indexing is a side effect of writes: failures are logged and
    never reach the caller.
    """

    entity_name = "Tenant"

    def __init__(
        self,
        db: AsyncSession,
        redis: Redis | None = None,
        *,
        settings: Settings | None = None,
        runner: CacheTaskRunner | None = None,
        indexer: SearchIndexer | None = None,
    ):
        super().__init__(db, redis, settings=settings, runner=runner)
        ttl = self.settings.cache_ttl
        self.indexer = indexer
        self.repo = TenantRepository(
            db, self.namespace("tenant", ttl.tenant), ttl=ttl.tenant, runner=runner
        )
        self.user_tenants = UserTenantRepository(
            db, self.namespace("user_tenant", ttl.relation), ttl=ttl.relation, runner=runner
        )

    async def create(self, body: TenantCreate) -> TenantRead:
        """Create a tenant.

        Args:
            body: Tenant fields; slug is derived from name when missing

        Returns:
            The created tenant

        Raises:
            FieldRequiredError: If name is empty
            FieldInvalidError: If no usable slug can be derived
            AlreadyExistsError: If the slug is taken
        """
        name = body.name.strip()
        if not name:
            raise FieldRequiredError("name")
        slug = body.slug or slugify(name)
        if not slug or not SLUG_PATTERN.match(slug):
            raise FieldInvalidError("slug", slug, "cannot derive a slug from name")
        if await self.repo.slug_exists(slug):
            raise AlreadyExistsError(self.entity_name, slug)

        values = body.model_dump(exclude={"name", "slug"})
        async with self.store_errors("create", slug):
            tenant = await self.repo.create(Tenant(name=name, slug=slug, **values))

        logger.info("tenant_created", tenant_id=tenant.id, slug=slug)
        await self._index(tenant)
        return self.serialize(tenant)

    async def get(self, identifier: str) -> TenantRead:
        """Get a tenant by id or slug.

        Raises:
            FieldRequiredError: If identifier is empty
            NotFoundError: If no tenant matches
        """
        if not identifier:
            raise FieldRequiredError("tenant")
        tenant = await self.repo.get_by_id_or_slug(identifier)
        if tenant is None:
            raise NotFoundError(self.entity_name, identifier)
        return self.serialize(tenant)

    async def get_by_slug(self, slug: str) -> TenantRead:
        tenant = await self.repo.get_by_slug(slug)
        if tenant is None:
            raise NotFoundError(self.entity_name, slug)
        return self.serialize(tenant)

    async def get_by_user(self, user_id: str) -> TenantRead:
        """Get the tenant a user was first bound to."""
        tenant_ids = await self.user_tenants.right_ids(user_id)
        if not tenant_ids:
            raise NotFoundError(self.entity_name, f"user:{user_id}")
        return await self.get(tenant_ids[0])

    async def list_by_user(self, user_id: str) -> list[TenantRead]:
        tenant_ids = await self.user_tenants.right_ids(user_id)
        tenants = await self.repo.get_many(tenant_ids)
        return [self.serialize(t) for t in tenants]

    async def update(self, identifier: str, body: TenantUpdate) -> TenantRead:
        """Apply the fields set on body.

        Raises:
            NotFoundError: If no tenant matches
            AlreadyExistsError: If the new slug is taken
        """
        tenant = await self.repo.get_for_update(identifier)
        if tenant is None:
            raise NotFoundError(self.entity_name, identifier)
        updates = body.model_dump(exclude_unset=True)
        if "slug" in updates and updates["slug"] != tenant.slug:
            if await self.repo.slug_exists(updates["slug"]):
                raise AlreadyExistsError(self.entity_name, updates["slug"])

        async with self.store_errors("update", identifier):
            tenant = await self.repo.update(tenant, updates)

        await self._index(tenant)
        return self.serialize(tenant)

    async def delete(self, identifier: str) -> None:
        """Delete a tenant and every row it owns.

        Quotas, billing, settings and relationship rows are removed by
        tenant id in the same transaction as the tenant itself.
        """
        tenant = await self.repo.get_for_update(identifier)
        if tenant is None:
            raise NotFoundError(self.entity_name, identifier)
        tenant_id = tenant.id
        ttl = self.settings.cache_ttl

        async with self.store_errors("delete", identifier):
            await QuotaRepository(
                self.db, self.namespace("quota", ttl.quota), ttl=ttl.quota, runner=self.runner
            ).delete_all_by_tenant_id(tenant_id, commit=False)
            await BillingRepository(
                self.db, self.namespace("billing", ttl.billing), ttl=ttl.billing, runner=self.runner
            ).delete_all_by_tenant_id(tenant_id, commit=False)
            await SettingRepository(
                self.db, self.namespace("setting", ttl.setting), ttl=ttl.setting, runner=self.runner
            ).delete_all_by_tenant_id(tenant_id, commit=False)
            for repo_cls, name in (
                (TenantGroupRepository, "tenant_group"),
                (TenantMenuRepository, "tenant_menu"),
                (TenantDictionaryRepository, "tenant_dictionary"),
                (TenantOptionRepository, "tenant_option"),
            ):
                await repo_cls(
                    self.db, self.namespace(name, ttl.relation), ttl=ttl.relation, runner=self.runner
                ).remove_all_by_left(tenant_id, commit=False)
            await self.user_tenants.remove_all_by_right(tenant_id, commit=False)
            await UserTenantRoleRepository(
                self.db,
                self.namespace("user_tenant_role", ttl.user_tenant_role),
                ttl=ttl.user_tenant_role,
                runner=self.runner,
            ).remove_all_by_tenant_id(tenant_id, commit=False)
            await self.repo.delete(tenant)

        logger.info("tenant_deleted", tenant_id=tenant_id)
        if self.indexer is not None:
            try:
                await self.indexer.delete("tenant", tenant_id)
            except Exception as exc:
                logger.warning("tenant_unindex_failed", tenant_id=tenant_id, error=str(exc))

    async def list_tenants(
        self,
        params: PageParams | None = None,
        *,
        type: str | None = None,
        disabled: bool | None = None,
    ) -> Page[TenantRead]:
        page = await self.repo.list_page(self.page_params(params), type=type, disabled=disabled)
        return page.map(self.serialize)

    async def count(self) -> int:
        return await self.repo.count()

    def serialize(self, tenant: Tenant) -> TenantRead:
        return TenantRead.model_validate(tenant)

    async def _index(self, tenant: Tenant) -> None:
        if self.indexer is None:
            return
        try:
            await self.indexer.index(
                "tenant", tenant.id, self.serialize(tenant).model_dump(mode="json")
            )
        except Exception as exc:
            logger.warning("tenant_index_failed", tenant_id=tenant.id, error=str(exc))
