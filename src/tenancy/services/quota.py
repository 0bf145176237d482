"""Quota enforcement and usage tracking."""

from redis.asyncio import Redis
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.config.settings import Settings
from tenancy.core.cache import CacheTaskRunner
from tenancy.core.exceptions import AlreadyExistsError, FieldRequiredError, NotFoundError
from tenancy.core.logging import get_logger
from tenancy.core.paging import Page, PageParams
from tenancy.db.models.tenant import QuotaType, QuotaUnit, TenantQuota
from tenancy.db.repositories import QuotaRepository
from tenancy.db.schemas.quota import QuotaCreate, QuotaRead, QuotaUpdate

from .base import BaseService

logger = get_logger(__name__)

# Ceiling given to quota rows created implicitly by update_usage
DEFAULT_QUOTA_LIMIT = 10 * 1024 * 1024 * 1024


def _type_value(quota_type: QuotaType | str) -> str:
    return quota_type.value if isinstance(quota_type, QuotaType) else quota_type


class QuotaService(BaseService):
    """Service for tenant quotas.

    A tenant without a quota row for a type is unrestricted for that type.
    """

    entity_name = "TenantQuota"

    def __init__(
        self,
        db: AsyncSession,
        redis: Redis | None = None,
        *,
        settings: Settings | None = None,
        runner: CacheTaskRunner | None = None,
    ):
        super().__init__(db, redis, settings=settings, runner=runner)
        ttl = self.settings.cache_ttl.quota
        self.repo = QuotaRepository(db, self.namespace("quota", ttl), ttl=ttl, runner=runner)

    async def create(self, body: QuotaCreate) -> QuotaRead:
        """Create a quota row.

        Raises:
            FieldRequiredError: If tenant_id or quota_type is missing
            AlreadyExistsError: If the tenant already has a quota of this type
        """
        if not body.tenant_id:
            raise FieldRequiredError("tenant_id")
        if body.quota_type is None:
            raise FieldRequiredError("quota_type")

        key = f"{body.tenant_id}:{body.quota_type.value}"
        if await self.repo.get_for_update(body.tenant_id, body.quota_type.value) is not None:
            raise AlreadyExistsError(self.entity_name, key)

        values = body.model_dump(mode="json")
        values["quota_name"] = values["quota_name"] or f"{body.quota_type.value} quota"
        async with self.store_errors("create", key):
            quota = await self.repo.create(TenantQuota(**values))
        return self.serialize(quota)

    async def get(self, quota_id: str) -> QuotaRead:
        quota = await self.repo.get_cached(quota_id)
        if quota is None:
            raise NotFoundError(self.entity_name, quota_id)
        return self.serialize(quota)

    async def get_by_tenant_and_type(
        self, tenant_id: str, quota_type: QuotaType | str
    ) -> QuotaRead:
        quota = await self.repo.get_by_tenant_and_type(tenant_id, _type_value(quota_type))
        if quota is None:
            raise NotFoundError(self.entity_name, f"{tenant_id}:{_type_value(quota_type)}")
        return self.serialize(quota)

    async def update(self, quota_id: str, body: QuotaUpdate) -> QuotaRead:
        """Absolute update of the fields set on body."""
        quota = await self.repo.get(quota_id)
        if quota is None:
            raise NotFoundError(self.entity_name, quota_id)
        async with self.store_errors("update", quota_id):
            quota = await self.repo.update(quota, body.model_dump(mode="json", exclude_unset=True))
        return self.serialize(quota)

    async def delete(self, quota_id: str) -> None:
        quota = await self.repo.get(quota_id)
        if quota is None:
            raise NotFoundError(self.entity_name, quota_id)
        async with self.store_errors("delete", quota_id):
            await self.repo.delete(quota)

    async def list_quotas(
        self,
        params: PageParams | None = None,
        *,
        tenant_id: str | None = None,
        quota_type: QuotaType | str | None = None,
    ) -> Page[QuotaRead]:
        page = await self.repo.list_page(
            self.page_params(params),
            tenant_id=tenant_id,
            quota_type=_type_value(quota_type) if quota_type is not None else None,
        )
        return page.map(self.serialize)

    async def check_quota_limit(
        self, tenant_id: str, quota_type: QuotaType | str, amount: int
    ) -> bool:
        """Whether the tenant may consume amount more units.

        Returns:
            True when no quota row exists or the quota is disabled,
            otherwise whether current_used + amount stays within max_value
        """
        quota = await self.repo.get_by_tenant_and_type(tenant_id, _type_value(quota_type))
        if quota is None or not quota.enabled:
            return True
        return quota.current_used + amount <= quota.max_value

    async def update_usage(
        self, tenant_id: str, quota_type: QuotaType | str, delta: int
    ) -> QuotaRead:
        """Add delta to the tenant's usage, never going below zero.

        An absent row is created with the default ceiling. The increment on
        an existing row is computed by the database in one statement.
        """
        if not tenant_id:
            raise FieldRequiredError("tenant_id")
        type_value = _type_value(quota_type)

        quota = await self.repo.get_for_update(tenant_id, type_value)
        if quota is None:
            try:
                quota = await self.repo.create(
                    TenantQuota(
                        tenant_id=tenant_id,
                        quota_type=type_value,
                        quota_name=f"{type_value} quota",
                        description=f"Auto-created {type_value} quota",
                        max_value=DEFAULT_QUOTA_LIMIT,
                        current_used=max(delta, 0),
                        unit=QuotaUnit.BYTES.value,
                        enabled=True,
                    )
                )
                logger.info("quota_auto_created", tenant_id=tenant_id, quota_type=type_value)
                return self.serialize(quota)
            except IntegrityError:
                # A concurrent writer created the row first; apply the delta to it.
                await self.db.rollback()
                quota = await self.repo.get_for_update(tenant_id, type_value)
                if quota is None:
                    raise
        return self.serialize(await self.repo.add_usage(quota, delta))

    async def get_usage(self, tenant_id: str, quota_type: QuotaType | str) -> int:
        quota = await self.repo.get_by_tenant_and_type(tenant_id, _type_value(quota_type))
        return quota.current_used if quota is not None else 0

    async def get_quota(self, tenant_id: str, quota_type: QuotaType | str) -> int:
        """Ceiling for the type; storage defaults to 10 GB, others to 0."""
        quota = await self.repo.get_by_tenant_and_type(tenant_id, _type_value(quota_type))
        if quota is not None:
            return quota.max_value
        if _type_value(quota_type) == QuotaType.STORAGE.value:
            return DEFAULT_QUOTA_LIMIT
        return 0

    async def is_quota_exceeded(self, tenant_id: str, quota_type: QuotaType | str) -> bool:
        quota = await self.repo.get_by_tenant_and_type(tenant_id, _type_value(quota_type))
        if quota is None or not quota.enabled:
            return False
        return quota.current_used >= quota.max_value

    async def get_tenant_quota_summary(self, tenant_id: str) -> list[QuotaRead]:
        return [self.serialize(q) for q in await self.repo.list_by_tenant(tenant_id)]

    def serialize(self, quota: TenantQuota) -> QuotaRead:
        return QuotaRead.model_validate(quota)
