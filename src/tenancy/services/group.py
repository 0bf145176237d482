"""Tenant to group bindings with a pluggable group lookup."""

from typing import Protocol

from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.config.settings import Settings
from tenancy.core.cache import CacheTaskRunner
from tenancy.core.logging import get_logger
from tenancy.core.paging import Page
from tenancy.db.repositories import GroupRepository, TenantGroupRepository
from tenancy.db.schemas.relations import GroupRead, TenantGroupRelation

from .relations import TenantRelationService

logger = get_logger(__name__)

ROOT_PARENTS = (None, "", "root")


class GroupLookup(Protocol):
    """Capability that resolves group ids to group records."""

    async def get_by_ids(self, ids: list[str]) -> list[GroupRead]:
        """Return the groups for ids; unknown ids are omitted."""
        ...


class RepositoryGroupLookup:
    """GroupLookup backed by the local groups table."""

    def __init__(self, db: AsyncSession):
        self.repo = GroupRepository(db)

    async def get_by_ids(self, ids: list[str]) -> list[GroupRead]:
        groups = await self.repo.get_many(ids)
        return [GroupRead.model_validate(g) for g in groups]


def placeholder_group(group_id: str) -> GroupRead:
    return GroupRead(id=group_id, name=f"Group {group_id}")


class TenantGroupService(TenantRelationService):
    """Service for groups bound to tenants.

    Group details come from the optional GroupLookup. When no lookup is
    configured or it fails, each id is returned as a placeholder record.
    """

    entity_name = "TenantGroup"
    repository_cls = TenantGroupRepository
    cache_name = "tenant_group"
    related_field = "group_id"

    def __init__(
        self,
        db: AsyncSession,
        redis: Redis | None = None,
        *,
        settings: Settings | None = None,
        runner: CacheTaskRunner | None = None,
        groups: GroupLookup | None = None,
    ):
        super().__init__(db, redis, settings=settings, runner=runner)
        self.groups = groups

    async def add_group_to_tenant(self, tenant_id: str, group_id: str) -> TenantGroupRelation:
        relation = await self.add(tenant_id, group_id)
        return TenantGroupRelation(
            tenant_id=relation.tenant_id,
            group_id=relation.related_id,
            added_at=relation.created_at,
        )

    async def remove_group_from_tenant(self, tenant_id: str, group_id: str) -> None:
        await self.remove(tenant_id, group_id)

    async def is_group_in_tenant(self, tenant_id: str, group_id: str) -> bool:
        return await self.exists(tenant_id, group_id)

    async def get_tenant_group_ids(self, tenant_id: str) -> list[str]:
        return await self.get_ids_by_tenant(tenant_id)

    async def get_group_tenants(self, group_id: str) -> list[str]:
        return await self.get_tenant_ids(group_id)

    async def get_tenant_groups(
        self, tenant_id: str, *, parent: str | None = None
    ) -> Page[GroupRead]:
        """Groups bound to tenant_id, filtered by parent.

        Args:
            tenant_id: Tenant id
            parent: Parent group id; when empty only root groups are returned
        """
        group_ids = await self.get_ids_by_tenant(tenant_id)
        if not group_ids:
            return Page(items=[], total=0)

        groups = await self._resolve(group_ids)
        if parent:
            items = [g for g in groups if g.parent_id == parent]
        else:
            items = [g for g in groups if g.parent_id in ROOT_PARENTS]
        return Page(items=items, total=len(items))

    async def _resolve(self, group_ids: list[str]) -> list[GroupRead]:
        if self.groups is None:
            return [placeholder_group(gid) for gid in group_ids]
        try:
            return await self.groups.get_by_ids(group_ids)
        except Exception as exc:
            logger.warning("group_lookup_failed", count=len(group_ids), error=str(exc))
            return [placeholder_group(gid) for gid in group_ids]
