"""Cache-aside building blocks shared by every repository.

The backing store is the source of truth. Reads consult Redis first and
fall through to the store on a miss; the fresh value is written back in
the background. Writes go to the store synchronously and the affected keys
are invalidated in the background. Cache work is best effort: failures are
logged at debug level and never reach the caller, and a missed
invalidation is bounded by the entry TTL.
"""

import asyncio
from collections.abc import Awaitable, Callable, Coroutine, Iterable
from typing import Any, Generic, Protocol, Self, TypeVar

from tenancy.core.logging import get_logger
from tenancy.core.redis import RedisCache

logger = get_logger(__name__)


class Cacheable(Protocol):
    """Model that can round-trip through a JSON cache entry."""

    def to_cache_dict(self) -> dict[str, Any]: ...

    @classmethod
    def from_cache_dict(cls, data: dict[str, Any]) -> Self: ...


T = TypeVar("T", bound=Cacheable)


class CacheTaskRunner:
    """Runs cache population and invalidation as tracked background tasks.

    The caller never awaits the work it schedules. drain() lets shutdown
    and tests wait for everything still in flight.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, operation: str) -> None:
        """Schedule a cache coroutine without waiting for it."""
        task = asyncio.create_task(self._guard(coro, operation))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        """Wait until all scheduled cache work has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    @staticmethod
    async def _guard(coro: Coroutine[Any, Any, Any], operation: str) -> None:
        try:
            await coro
        except Exception as exc:
            logger.debug("cache_operation_failed", operation=operation, error=str(exc))


_runner: CacheTaskRunner | None = None


def get_task_runner() -> CacheTaskRunner:
    """Process-wide runner used when a repository is not given one."""
    global _runner
    if _runner is None:
        _runner = CacheTaskRunner()
    return _runner


class CacheAside(Generic[T]):
    """Read-through / write-invalidate cache for one model class.

    Entries are the model's cache dict stored under one or more keys (the
    primary id plus any denormalized lookup keys such as a slug).

    Args:
        cache: Namespaced Redis cache for this entity class
        model: Model class used to rebuild cached entries
        ttl: Entry lifetime in seconds
        runner: Background runner for population and invalidation
    """

    def __init__(
        self,
        cache: RedisCache,
        model: type[T],
        *,
        ttl: int,
        runner: CacheTaskRunner | None = None,
    ):
        self.cache = cache
        self.model = model
        self.ttl = ttl
        self.runner = runner or get_task_runner()

    async def read(
        self,
        key: str,
        loader: Callable[[], Awaitable[T | None]],
        *,
        keys_for: Callable[[T], Iterable[str]] | None = None,
    ) -> T | None:
        """Return the entity for key, loading it from the store on a miss.

        Store errors raised by loader propagate unchanged.

        Args:
            key: Cache key to consult
            loader: Coroutine factory that queries the store
            keys_for: Extra keys to populate from the loaded entity
        """
        try:
            result = await self.cache.get(key)
            if result.hit and result.value is not None:
                return self.model.from_cache_dict(result.value)
        except Exception as exc:
            logger.debug("cache_read_failed", key=key, error=str(exc))

        value = await loader()
        if value is not None:
            keys = [key, *(keys_for(value) if keys_for else ())]
            self.populate(value, keys)
        return value

    def populate(self, value: T, keys: Iterable[str]) -> None:
        """Write value under every key in the background."""
        data = value.to_cache_dict()
        unique = list(dict.fromkeys(keys))
        self.runner.spawn(self._set_many(unique, data), operation="populate")

    def invalidate(self, *keys: str | None) -> None:
        """Delete keys in the background; None entries are ignored."""
        unique = list(dict.fromkeys(k for k in keys if k))
        if unique:
            self.runner.spawn(self.cache.delete(*unique), operation="invalidate")

    async def _set_many(self, keys: list[str], data: dict[str, Any]) -> None:
        for key in keys:
            await self.cache.set(key, data, ttl=self.ttl)


class RelationCache:
    """Three-namespace cache for a pairwise relationship.

    For a left/right pair the cache keeps:
      * ``relationship:{left}:{right}`` existence flag
      * ``{forward}:{left}`` list of right ids
      * ``{reverse}:{right}`` list of left ids
    Any mutation touching a pair invalidates all three together.
    """

    def __init__(
        self,
        cache: RedisCache,
        *,
        forward: str,
        reverse: str,
        ttl: int,
        runner: CacheTaskRunner | None = None,
    ):
        self.cache = cache
        self.forward = forward
        self.reverse = reverse
        self.ttl = ttl
        self.runner = runner or get_task_runner()

    def pair_key(self, left: str, right: str) -> str:
        return f"relationship:{left}:{right}"

    def forward_key(self, left: str) -> str:
        return f"{self.forward}:{left}"

    def reverse_key(self, right: str) -> str:
        return f"{self.reverse}:{right}"

    async def read_exists(self, left: str, right: str, loader: Callable[[], Awaitable[bool]]) -> bool:
        key = self.pair_key(left, right)
        cached = await self._get(key)
        if cached is not None:
            return bool(cached)
        value = await loader()
        self._spawn_set(key, value)
        return value

    async def read_forward(self, left: str, loader: Callable[[], Awaitable[list[str]]]) -> list[str]:
        return await self._read_list(self.forward_key(left), loader)

    async def read_reverse(self, right: str, loader: Callable[[], Awaitable[list[str]]]) -> list[str]:
        return await self._read_list(self.reverse_key(right), loader)

    def invalidate_pair(self, left: str, right: str) -> None:
        self._spawn_delete(
            self.pair_key(left, right), self.forward_key(left), self.reverse_key(right)
        )

    def invalidate_pairs(self, pairs: Iterable[tuple[str, str]]) -> None:
        keys: list[str] = []
        for left, right in pairs:
            keys.extend(
                (self.pair_key(left, right), self.forward_key(left), self.reverse_key(right))
            )
        self._spawn_delete(*keys)

    async def _read_list(self, key: str, loader: Callable[[], Awaitable[list[str]]]) -> list[str]:
        cached = await self._get(key)
        if cached is not None:
            return list(cached)
        value = await loader()
        self._spawn_set(key, value)
        return value

    async def _get(self, key: str) -> Any:
        try:
            result = await self.cache.get(key)
        except Exception as exc:
            logger.debug("cache_read_failed", key=key, error=str(exc))
            return None
        return result.value if result.hit else None

    def _spawn_set(self, key: str, value: Any) -> None:
        self.runner.spawn(self.cache.set(key, value, ttl=self.ttl), operation="populate")

    def _spawn_delete(self, *keys: str) -> None:
        unique = list(dict.fromkeys(keys))
        if unique:
            self.runner.spawn(self.cache.delete(*unique), operation="invalidate")
