"""Shared service plumbing: cache namespaces and store error translation."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from redis.asyncio import Redis
from sqlalchemy.exc import IntegrityError, MultipleResultsFound, NoResultFound
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.config.settings import Settings, get_settings
from tenancy.core.cache import CacheTaskRunner
from tenancy.core.exceptions import AlreadyExistsError, NotFoundError, NotSingularError
from tenancy.core.logging import get_logger
from tenancy.core.paging import PageParams
from tenancy.core.redis import RedisCache
from tenancy.utils.exceptions import TenancyError

logger = get_logger(__name__)


def translate_store_error(entity: str, key: Any, exc: Exception, operation: str) -> Exception:
    """Map a SQLAlchemy error to the domain error callers handle.

    Args:
        entity: Entity name used in the domain error
        key: Identifier involved in the failed operation
        exc: The exception raised by the store
        operation: Operation tag for the log record

    Returns:
        Domain error to raise, or exc itself when it has no mapping
    """
    if isinstance(exc, NoResultFound):
        return NotFoundError(entity, key)
    if isinstance(exc, IntegrityError):
        return AlreadyExistsError(entity, key)
    if isinstance(exc, MultipleResultsFound):
        return NotSingularError(entity, key)
    if not isinstance(exc, TenancyError):
        logger.error(
            "store_operation_failed",
            entity=entity,
            operation=operation,
            key=str(key),
            error=str(exc),
        )
    return exc


class BaseService:
    """Base class for services backed by the store and a Redis cache.

    Args:
        db: Async SQLAlchemy session
        redis: Redis client (the shared client when None)
        settings: Application settings (the cached settings when None)
        runner: Background runner for cache work (the process runner when None)
    """

    entity_name: str = "Record"

    def __init__(
        self,
        db: AsyncSession,
        redis: Redis | None = None,
        *,
        settings: Settings | None = None,
        runner: CacheTaskRunner | None = None,
    ):
        self.db = db
        self.redis = redis
        self.settings = settings or get_settings()
        self.runner = runner

    def namespace(self, name: str, ttl: int) -> RedisCache:
        """Cache namespaced under ``{CACHE_PREFIX}:{name}``."""
        return RedisCache(self.redis, prefix=f"{self.settings.CACHE_PREFIX}:{name}", default_ttl=ttl)

    def page_params(self, params: PageParams | None) -> PageParams:
        """Fill in the default limit and clamp it to the configured maximum."""
        if params is None:
            return PageParams(limit=self.settings.DEFAULT_PAGE_LIMIT)
        limit = params.limit if params.limit > 0 else self.settings.DEFAULT_PAGE_LIMIT
        return PageParams(
            cursor=params.cursor,
            limit=min(limit, self.settings.MAX_PAGE_LIMIT),
            direction=params.direction,
        )

    @asynccontextmanager
    async def store_errors(
        self, operation: str, key: Any, *, entity: str | None = None
    ) -> AsyncIterator[None]:
        """Translate store errors raised inside the block.

        A failed flush or commit leaves the session unusable, so it is
        rolled back before the domain error is raised.
        """
        try:
            yield
        except (IntegrityError, NoResultFound, MultipleResultsFound) as exc:
            if isinstance(exc, IntegrityError):
                await self.db.rollback()
            raise translate_store_error(entity or self.entity_name, key, exc, operation) from exc
        except TenancyError:
            raise
        except Exception as exc:
            translate_store_error(entity or self.entity_name, key, exc, operation)
            raise
