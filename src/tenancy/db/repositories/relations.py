"""Generic repository for pairwise relationship rows.

Every tenant relationship table (groups, menus, dictionaries, options,
user memberships) is a join row between two ids. One repository class,
parameterized by model and column names, serves all of them and keeps
the pair, forward and reverse cache namespaces consistent.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from tenancy.core.cache import CacheTaskRunner, RelationCache
from tenancy.core.redis import RedisCache
from tenancy.db.models.relations import (
    TenantDictionary,
    TenantGroup,
    TenantMenu,
    TenantOption,
    UserTenant,
)

from .base import BaseRepository, ModelType


class RelationRepository(BaseRepository[ModelType]):
    """Repository for a (left, right) relationship table.

    Subclasses set ``left``/``right`` to the column names and
    ``forward``/``reverse`` to the list cache namespaces.
    """

    left: str
    right: str
    forward: str
    reverse: str

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
            cache, forward=self.forward, reverse=self.reverse, ttl=ttl, runner=runner
        )

    @property
    def left_col(self) -> InstrumentedAttribute:
        return getattr(self.model, self.left)

    @property
    def right_col(self) -> InstrumentedAttribute:
        return getattr(self.model, self.right)

    async def add(self, left_id: str, right_id: str, **extra: Any) -> ModelType:
        """Create the relationship row and invalidate its cache keys.

        Raises:
            IntegrityError: If the pair already exists
        """
        row = self.model(**{self.left: left_id, self.right: right_id}, **extra)
        created = await self.create(row)
        self.relations.invalidate_pair(left_id, right_id)
        return created

    async def get_pair(self, left_id: str, right_id: str) -> ModelType | None:
        return await self.find_one(self.left_col == left_id, self.right_col == right_id)

    async def exists(self, left_id: str, right_id: str) -> bool:  # type: ignore[override]
        async def load() -> bool:
            return await self.count(self.left_col == left_id, self.right_col == right_id) > 0

        return await self.relations.read_exists(left_id, right_id, load)

    async def right_ids(self, left_id: str) -> list[str]:
        """Ids on the right side related to left_id (forward list)."""

        async def load() -> list[str]:
            result = await self.db.execute(
                select(self.right_col).where(self.left_col == left_id).order_by(self.model.id)
            )
            return [str(v) for v in result.scalars().all()]

        return await self.relations.read_forward(left_id, load)

    async def left_ids(self, right_id: str) -> list[str]:
        """Ids on the left side related to right_id (reverse list)."""

        async def load() -> list[str]:
            result = await self.db.execute(
                select(self.left_col).where(self.right_col == right_id).order_by(self.model.id)
            )
            return [str(v) for v in result.scalars().all()]

        return await self.relations.read_reverse(right_id, load)

    async def remove(self, left_id: str, right_id: str) -> bool:
        """Delete the pair.

        Returns:
            True if a row was deleted, False if the pair did not exist
        """
        row = await self.get_pair(left_id, right_id)
        if row is None:
            return False
        await self.delete(row)
        self.relations.invalidate_pair(left_id, right_id)
        return True

    async def remove_all_by_left(self, left_id: str, *, commit: bool = True) -> int:
        return await self._remove_where(self.left_col == left_id, commit=commit)

    async def remove_all_by_right(self, right_id: str, *, commit: bool = True) -> int:
        return await self._remove_where(self.right_col == right_id, commit=commit)

    async def _remove_where(self, criterion, *, commit: bool) -> int:
        rows = await self.find_all(criterion)
        pairs = [(getattr(r, self.left), getattr(r, self.right)) for r in rows]
        for row in rows:
            await self.db.delete(row)
        if commit:
            await self.db.commit()
        else:
            await self.db.flush()
        self.relations.invalidate_pairs(pairs)
        return len(rows)


class TenantGroupRepository(RelationRepository[TenantGroup]):
    entity_name = "TenantGroup"
    left, right = "tenant_id", "group_id"
    forward, reverse = "tenant_groups", "group_tenants"


class TenantMenuRepository(RelationRepository[TenantMenu]):
    entity_name = "TenantMenu"
    left, right = "tenant_id", "menu_id"
    forward, reverse = "tenant_menus", "menu_tenants"


class TenantDictionaryRepository(RelationRepository[TenantDictionary]):
    entity_name = "TenantDictionary"
    left, right = "tenant_id", "dictionary_id"
    forward, reverse = "tenant_dictionaries", "dictionary_tenants"


class TenantOptionRepository(RelationRepository[TenantOption]):
    entity_name = "TenantOption"
    left, right = "tenant_id", "option_id"
    forward, reverse = "tenant_options", "option_tenants"


class UserTenantRepository(RelationRepository[UserTenant]):
    entity_name = "UserTenant"
    left, right = "user_id", "tenant_id"
    forward, reverse = "user_tenants", "tenant_users"
