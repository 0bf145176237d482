"""Tenant relationship services for menus, dictionaries, options and users."""

from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.config.settings import Settings
from tenancy.core.cache import CacheTaskRunner
from tenancy.core.exceptions import AlreadyExistsError, FieldRequiredError, NotFoundError
from tenancy.db.repositories import (
    RelationRepository,
    TenantDictionaryRepository,
    TenantMenuRepository,
    TenantOptionRepository,
    UserTenantRepository,
)
from tenancy.db.schemas.relations import RelationRead, UserTenantRead

from .base import BaseService


class TenantRelationService(BaseService):
    """Service over one (tenant, related id) relationship table.

    Subclasses name the repository class, the cache namespace and the
    field that holds the related id.
    """

    repository_cls: type[RelationRepository]
    cache_name: str
    related_field: str

    def __init__(
        self,
        db: AsyncSession,
        redis: Redis | None = None,
        *,
        settings: Settings | None = None,
        runner: CacheTaskRunner | None = None,
    ):
        super().__init__(db, redis, settings=settings, runner=runner)
        ttl = self.settings.cache_ttl.relation
        self.repo = self.repository_cls(
            db, self.namespace(self.cache_name, ttl), ttl=ttl, runner=runner
        )

    async def add(self, tenant_id: str, related_id: str) -> RelationRead:
        """Bind related_id to tenant_id.

        Raises:
            FieldRequiredError: If either id is empty
            AlreadyExistsError: If the pair is already bound
        """
        if not tenant_id:
            raise FieldRequiredError("tenant_id")
        if not related_id:
            raise FieldRequiredError(self.related_field)
        key = f"{tenant_id}:{related_id}"
        if await self.repo.get_pair(tenant_id, related_id) is not None:
            raise AlreadyExistsError(self.entity_name, key)
        async with self.store_errors("add", key):
            row = await self.repo.add(tenant_id, related_id)
        return self.serialize(row)

    async def remove(self, tenant_id: str, related_id: str) -> None:
        async with self.store_errors("remove", f"{tenant_id}:{related_id}"):
            removed = await self.repo.remove(tenant_id, related_id)
        if not removed:
            raise NotFoundError(self.entity_name, f"{tenant_id}:{related_id}")

    async def exists(self, tenant_id: str, related_id: str) -> bool:
        return await self.repo.exists(tenant_id, related_id)

    async def get_ids_by_tenant(self, tenant_id: str) -> list[str]:
        return await self.repo.right_ids(tenant_id)

    async def get_tenant_ids(self, related_id: str) -> list[str]:
        return await self.repo.left_ids(related_id)

    async def delete_all_by_tenant(self, tenant_id: str) -> int:
        async with self.store_errors("delete_all_by_tenant", tenant_id):
            return await self.repo.remove_all_by_left(tenant_id)

    async def delete_all_by_related(self, related_id: str) -> int:
        async with self.store_errors("delete_all_by_related", related_id):
            return await self.repo.remove_all_by_right(related_id)

    def serialize(self, row) -> RelationRead:
        return RelationRead(
            id=row.id,
            tenant_id=row.tenant_id,
            related_id=getattr(row, self.related_field),
            created_by=row.created_by,
            created_at=row.created_at,
        )


class TenantMenuService(TenantRelationService):
    entity_name = "TenantMenu"
    repository_cls = TenantMenuRepository
    cache_name = "tenant_menu"
    related_field = "menu_id"


class TenantDictionaryService(TenantRelationService):
    entity_name = "TenantDictionary"
    repository_cls = TenantDictionaryRepository
    cache_name = "tenant_dictionary"
    related_field = "dictionary_id"


class TenantOptionService(TenantRelationService):
    entity_name = "TenantOption"
    repository_cls = TenantOptionRepository
    cache_name = "tenant_option"
    related_field = "option_id"


class UserTenantService(BaseService):
    """Membership of users in tenants."""

    entity_name = "UserTenant"

    def __init__(
        self,
        db: AsyncSession,
        redis: Redis | None = None,
        *,
        settings: Settings | None = None,
        runner: CacheTaskRunner | None = None,
    ):
        super().__init__(db, redis, settings=settings, runner=runner)
        ttl = self.settings.cache_ttl.relation
        self.repo = UserTenantRepository(
            db, self.namespace("user_tenant", ttl), ttl=ttl, runner=runner
        )

    async def bind(self, user_id: str, tenant_id: str) -> UserTenantRead:
        """Make user_id a member of tenant_id.

        Raises:
            FieldRequiredError: If either id is empty
            AlreadyExistsError: If the user is already a member
        """
        if not user_id:
            raise FieldRequiredError("user_id")
        if not tenant_id:
            raise FieldRequiredError("tenant_id")
        key = f"{user_id}:{tenant_id}"
        if await self.repo.get_pair(user_id, tenant_id) is not None:
            raise AlreadyExistsError(self.entity_name, key)
        async with self.store_errors("bind", key):
            row = await self.repo.add(user_id, tenant_id)
        return UserTenantRead.model_validate(row)

    async def unbind(self, user_id: str, tenant_id: str) -> None:
        async with self.store_errors("unbind", f"{user_id}:{tenant_id}"):
            removed = await self.repo.remove(user_id, tenant_id)
        if not removed:
            raise NotFoundError(self.entity_name, f"{user_id}:{tenant_id}")

    async def get_user_tenant_ids(self, user_id: str) -> list[str]:
        return await self.repo.right_ids(user_id)

    async def get_tenant_user_ids(self, tenant_id: str) -> list[str]:
        return await self.repo.left_ids(tenant_id)

    async def is_user_in_tenant(self, user_id: str, tenant_id: str) -> bool:
        return await self.repo.exists(user_id, tenant_id)
