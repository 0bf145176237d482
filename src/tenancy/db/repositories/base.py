"""Base repositories with CRUD, cursor pagination and cache-aside reads.

Usage:
    from tenancy.db.repositories.base import CachedRepository

    class TenantRepository(CachedRepository[Tenant]):
        entity_name = "Tenant"

        def cache_keys(self, obj: Tenant) -> list[str]:
            return [f"id:{obj.id}", f"slug:{obj.slug}"]

    repo = TenantRepository(db_session, cache)
    tenant = await repo.get_cached(tenant_id)
"""

from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from tenancy.core.cache import CacheAside, CacheTaskRunner
from tenancy.core.paging import Direction, Page, PageParams, encode_cursor
from tenancy.core.redis import RedisCache
from tenancy.db.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Generic repository for SQLAlchemy models.

    Type Parameters:
        ModelType: The SQLAlchemy model class

    Attributes:
        model: The model class
        db: The database session
    """

    model: type[ModelType]
    entity_name: str = "Record"

    def __init__(self, db: AsyncSession):
        self.db = db

    def __init_subclass__(cls, **kwargs):
        """Extract model type from generic parameter."""
        super().__init_subclass__(**kwargs)
        for base in getattr(cls, "__orig_bases__", []):
            args = getattr(base, "__args__", None)
            if args and len(args) >= 1:
                first_arg = args[0]
                if isinstance(first_arg, type) and issubclass(first_arg, Base):
                    cls.model = first_arg
                    break

    async def get(self, pk: str) -> ModelType | None:
        """Get a single record by primary key from the store."""
        return await self.db.get(self.model, pk)

    async def get_many(self, pks: Sequence[str]) -> list[ModelType]:
        """Get multiple records by primary keys.

        Returns:
            List of found models (may be fewer than requested if some not found)
        """
        if not pks:
            return []
        stmt = select(self.model).where(self._get_pk_column().in_(pks))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def find_one(self, *criteria: ColumnElement[bool]) -> ModelType | None:
        """Get the single record matching criteria.

        Raises:
            MultipleResultsFound: If more than one row matches
        """
        result = await self.db.execute(select(self.model).where(*criteria))
        return result.scalar_one_or_none()

    async def find_all(
        self, *criteria: ColumnElement[bool], limit: int | None = None
    ) -> list[ModelType]:
        """List records matching criteria ordered by primary key."""
        stmt = select(self.model).where(*criteria).order_by(self._get_pk_column())
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def count(self, *criteria: ColumnElement[bool]) -> int:
        """Count records matching criteria."""
        stmt = select(func.count(self._get_pk_column())).where(*criteria)
        result = await self.db.execute(stmt)
        return result.scalar() or 0

    async def paginate(
        self, params: PageParams, *criteria: ColumnElement[bool]
    ) -> Page[ModelType]:
        """Cursor-paginate records matching criteria, newest first.

        Args:
            params: Cursor, limit and direction
            criteria: Filter expressions

        Returns:
            Page of model instances
        """
        pk_col = self._get_pk_column()
        total = await self.count(*criteria)
        boundary = params.boundary()

        stmt = select(self.model).where(*criteria)
        if params.direction == Direction.FORWARD:
            if boundary is not None:
                stmt = stmt.where(pk_col < boundary)
            stmt = stmt.order_by(pk_col.desc())
        else:
            if boundary is not None:
                stmt = stmt.where(pk_col > boundary)
            stmt = stmt.order_by(pk_col.asc())

        result = await self.db.execute(stmt.limit(params.limit + 1))
        rows = list(result.scalars().all())
        has_more = len(rows) > params.limit
        rows = rows[: params.limit]

        if params.direction == Direction.FORWARD:
            has_next, has_prev = has_more, boundary is not None
        else:
            rows.reverse()
            has_next, has_prev = boundary is not None, has_more

        return Page(
            items=rows,
            total=total,
            cursor=encode_cursor(self._pk_value(rows[-1])) if rows and has_next else None,
            prev_cursor=encode_cursor(self._pk_value(rows[0])) if rows and has_prev else None,
            has_next=has_next,
            has_prev=has_prev,
        )

    async def create(self, obj: ModelType, *, commit: bool = True) -> ModelType:
        """Create a new record.

        Args:
            obj: Model instance to create
            commit: Whether to commit the transaction
        """
        self.db.add(obj)
        if commit:
            await self.db.commit()
            await self.db.refresh(obj)
        else:
            await self.db.flush()
        return obj

    async def update(
        self, obj: ModelType, updates: dict[str, Any], *, commit: bool = True
    ) -> ModelType:
        """Update a record with given values.

        Unknown keys are ignored.
        """
        for field, value in updates.items():
            if hasattr(obj, field):
                setattr(obj, field, value)

        if commit:
            await self.db.commit()
            await self.db.refresh(obj)
        else:
            await self.db.flush()
        return obj

    async def delete(self, obj: ModelType, *, commit: bool = True) -> None:
        """Delete a record."""
        await self.db.delete(obj)
        if commit:
            await self.db.commit()
        else:
            await self.db.flush()

    async def exists(self, pk: str) -> bool:
        """Check if a record exists."""
        return await self.count(self._get_pk_column() == pk) > 0

    def _get_pk_column(self):
        mapper = self.model.__mapper__
        pk_cols = mapper.primary_key
        if not pk_cols:
            raise ValueError(f"No primary key found for {self.model.__name__}")
        return pk_cols[0]

    def _pk_value(self, obj: ModelType) -> str:
        return str(getattr(obj, self._get_pk_column().key))


class CachedRepository(BaseRepository[ModelType]):
    """Repository whose single-row reads go through a CacheAside.

    Subclasses list the cache keys an instance is stored under in
    cache_keys(); every write invalidates the keys of the row before and
    after the change. Rows returned by get_cached() may be transient
    rebuilds from the cache, so writes always reload from the store.
    """

    def __init__(
        self,
        db: AsyncSession,
        cache: RedisCache,
        *,
        ttl: int,
        runner: CacheTaskRunner | None = None,
    ):
        super().__init__(db)
        self.cache = CacheAside(cache, self.model, ttl=ttl, runner=runner)

    def cache_keys(self, obj: ModelType) -> list[str]:
        return [f"id:{self._pk_value(obj)}"]

    async def get_cached(self, pk: str) -> ModelType | None:
        """Read by primary key through the cache."""
        return await self.cache.read(
            f"id:{pk}", lambda: self.get(pk), keys_for=self.cache_keys
        )

    async def read_through(self, key: str, *criteria: ColumnElement[bool]) -> ModelType | None:
        """Read one row by a lookup key through the cache."""
        return await self.cache.read(
            key, lambda: self.find_one(*criteria), keys_for=self.cache_keys
        )

    async def create(self, obj: ModelType, *, commit: bool = True) -> ModelType:
        created = await super().create(obj, commit=commit)
        self.cache.invalidate(*self.cache_keys(created))
        return created

    async def update(
        self, obj: ModelType, updates: dict[str, Any], *, commit: bool = True
    ) -> ModelType:
        stale_keys = self.cache_keys(obj)
        updated = await super().update(obj, updates, commit=commit)
        self.cache.invalidate(*stale_keys, *self.cache_keys(updated))
        return updated

    async def delete(self, obj: ModelType, *, commit: bool = True) -> None:
        keys = self.cache_keys(obj)
        await super().delete(obj, commit=commit)
        self.cache.invalidate(*keys)
