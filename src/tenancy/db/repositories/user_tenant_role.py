"""Repository for user roles scoped to a tenant."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.core.cache import CacheTaskRunner, RelationCache
from tenancy.core.redis import RedisCache
from tenancy.db.models.relations import UserTenantRole

from .base import BaseRepository


class UserTenantRoleRepository(BaseRepository[UserTenantRole]):
    """Repository for (user, tenant, role) rows.

    The triple is cached as a relation between ``{user}:{tenant}`` and
    ``{tenant}:{role}``, which yields the keys
    ``relationship:{user}:{tenant}:{tenant}:{role}``,
    ``user_roles:{user}:{tenant}`` (role ids) and
    ``role_users:{tenant}:{role}`` (user ids).
    """

    entity_name = "UserTenantRole"

    def __init__(
        self,
        db: AsyncSession,
        cache: RedisCache,
        *,
        ttl: int,
        runner: CacheTaskRunner | None = None,
    ):
        super().__init__(db)
        self.relations = RelationCache(
            cache, forward="user_roles", reverse="role_users", ttl=ttl, runner=runner
        )

    @staticmethod
    def _member(user_id: str, tenant_id: str) -> str:
        return f"{user_id}:{tenant_id}"

    @staticmethod
    def _grant(tenant_id: str, role_id: str) -> str:
        return f"{tenant_id}:{role_id}"

    def _invalidate(self, rows: list[tuple[str, str, str]]) -> None:
        self.relations.invalidate_pairs(
            (self._member(u, t), self._grant(t, r)) for u, t, r in rows
        )

    async def add(self, user_id: str, tenant_id: str, role_id: str) -> UserTenantRole:
        """Grant role_id to user_id in tenant_id.

        Raises:
            IntegrityError: If the grant already exists
        """
        row = await self.create(
            UserTenantRole(user_id=user_id, tenant_id=tenant_id, role_id=role_id)
        )
        self._invalidate([(user_id, tenant_id, role_id)])
        return row

    async def get_triple(self, user_id: str, tenant_id: str, role_id: str) -> UserTenantRole | None:
        return await self.find_one(
            UserTenantRole.user_id == user_id,
            UserTenantRole.tenant_id == tenant_id,
            UserTenantRole.role_id == role_id,
        )

    async def has_role(self, user_id: str, tenant_id: str, role_id: str) -> bool:
        async def load() -> bool:
            return (
                await self.count(
                    UserTenantRole.user_id == user_id,
                    UserTenantRole.tenant_id == tenant_id,
                    UserTenantRole.role_id == role_id,
                )
                > 0
            )

        return await self.relations.read_exists(
            self._member(user_id, tenant_id), self._grant(tenant_id, role_id), load
        )

    async def role_ids(self, user_id: str, tenant_id: str) -> list[str]:
        async def load() -> list[str]:
            result = await self.db.execute(
                select(UserTenantRole.role_id)
                .where(UserTenantRole.user_id == user_id, UserTenantRole.tenant_id == tenant_id)
                .order_by(UserTenantRole.id)
            )
            return list(result.scalars().all())

        return await self.relations.read_forward(self._member(user_id, tenant_id), load)

    async def user_ids(self, tenant_id: str, role_id: str) -> list[str]:
        async def load() -> list[str]:
            result = await self.db.execute(
                select(UserTenantRole.user_id)
                .where(UserTenantRole.tenant_id == tenant_id, UserTenantRole.role_id == role_id)
                .order_by(UserTenantRole.id)
            )
            return list(result.scalars().all())

        return await self.relations.read_reverse(self._grant(tenant_id, role_id), load)

    async def list_by_tenant(self, tenant_id: str) -> list[UserTenantRole]:
        return await self.find_all(UserTenantRole.tenant_id == tenant_id)

    async def remove(self, user_id: str, tenant_id: str, role_id: str) -> bool:
        row = await self.get_triple(user_id, tenant_id, role_id)
        if row is None:
            return False
        await self.delete(row)
        self._invalidate([(user_id, tenant_id, role_id)])
        return True

    async def remove_all_by_tenant_id(self, tenant_id: str, *, commit: bool = True) -> int:
        rows = await self.list_by_tenant(tenant_id)
        triples = [(r.user_id, r.tenant_id, r.role_id) for r in rows]
        for row in rows:
            await self.db.delete(row)
        if commit:
            await self.db.commit()
        else:
            await self.db.flush()
        self._invalidate(triples)
        return len(rows)
