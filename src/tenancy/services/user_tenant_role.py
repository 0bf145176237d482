"""Roles granted to users inside a tenant."""

from collections import defaultdict
from typing import Any

from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.config.settings import Settings
from tenancy.core.cache import CacheTaskRunner
from tenancy.core.exceptions import (
    AlreadyExistsError,
    FieldInvalidError,
    FieldRequiredError,
    NotFoundError,
)
from tenancy.core.logging import get_logger
from tenancy.db.repositories import UserTenantRoleRepository
from tenancy.db.schemas.user_tenant_role import (
    BulkRoleError,
    BulkRoleUpdateResult,
    RoleOperation,
    RoleUpdateItem,
    TenantUserRoles,
    UserTenantRoleRead,
)

from .base import BaseService

logger = get_logger(__name__)


class UserTenantRoleService(BaseService):
    """Service for (user, tenant, role) grants."""

    entity_name = "UserTenantRole"

    def __init__(
        self,
        db: AsyncSession,
        redis: Redis | None = None,
        *,
        settings: Settings | None = None,
        runner: CacheTaskRunner | None = None,
    ):
        super().__init__(db, redis, settings=settings, runner=runner)
        ttl = self.settings.cache_ttl.user_tenant_role
        self.repo = UserTenantRoleRepository(
            db, self.namespace("user_tenant_role", ttl), ttl=ttl, runner=runner
        )

    async def add_role_to_user_in_tenant(
        self, user_id: str, tenant_id: str, role_id: str
    ) -> UserTenantRoleRead:
        """Grant role_id to user_id within tenant_id.

        Raises:
            FieldRequiredError: If any id is empty
            AlreadyExistsError: If the grant already exists
        """
        for field, value in (("user_id", user_id), ("tenant_id", tenant_id), ("role_id", role_id)):
            if not value:
                raise FieldRequiredError(field)
        key = f"{user_id}:{tenant_id}:{role_id}"
        if await self.repo.get_triple(user_id, tenant_id, role_id) is not None:
            raise AlreadyExistsError(self.entity_name, key)
        async with self.store_errors("add_role", key):
            row = await self.repo.add(user_id, tenant_id, role_id)
        return UserTenantRoleRead.model_validate(row)

    async def remove_role_from_user_in_tenant(
        self, user_id: str, tenant_id: str, role_id: str
    ) -> None:
        key = f"{user_id}:{tenant_id}:{role_id}"
        async with self.store_errors("remove_role", key):
            removed = await self.repo.remove(user_id, tenant_id, role_id)
        if not removed:
            raise NotFoundError(self.entity_name, key)

    async def get_user_roles_in_tenant(self, user_id: str, tenant_id: str) -> list[str]:
        return await self.repo.role_ids(user_id, tenant_id)

    async def is_user_in_role_in_tenant(self, user_id: str, tenant_id: str, role_id: str) -> bool:
        return await self.repo.has_role(user_id, tenant_id, role_id)

    async def get_tenant_users_by_role(self, tenant_id: str, role_id: str) -> list[str]:
        return await self.repo.user_ids(tenant_id, role_id)

    async def list_tenant_users(
        self, tenant_id: str, role_id: str | None = None
    ) -> list[TenantUserRoles]:
        """Users of a tenant with their role ids, optionally only those holding role_id."""
        grouped: dict[str, list[str]] = defaultdict(list)
        for row in await self.repo.list_by_tenant(tenant_id):
            grouped[row.user_id].append(row.role_id)
        return [
            TenantUserRoles(user_id=user_id, tenant_id=tenant_id, role_ids=role_ids)
            for user_id, role_ids in grouped.items()
            if role_id is None or role_id in role_ids
        ]

    async def update_user_tenant_role(
        self, user_id: str, tenant_id: str, old_role_id: str, new_role_id: str
    ) -> dict[str, Any]:
        """Replace old_role_id with new_role_id for the user.

        A missing old grant is logged and does not stop the new grant.
        """
        try:
            await self.remove_role_from_user_in_tenant(user_id, tenant_id, old_role_id)
        except NotFoundError as exc:
            logger.warning(
                "old_role_remove_failed",
                user_id=user_id,
                tenant_id=tenant_id,
                role_id=old_role_id,
                error=str(exc),
            )
        await self.add_role_to_user_in_tenant(user_id, tenant_id, new_role_id)
        return {
            "user_id": user_id,
            "tenant_id": tenant_id,
            "old_role_id": old_role_id,
            "new_role_id": new_role_id,
            "status": "updated",
        }

    async def bulk_update_user_tenant_roles(
        self, tenant_id: str, updates: list[RoleUpdateItem]
    ) -> BulkRoleUpdateResult:
        """Apply add/remove/update operations one by one.

        A failing item is recorded in errors and the rest still run.
        """
        result = BulkRoleUpdateResult(tenant_id=tenant_id, total=len(updates))
        for item in updates:
            try:
                outcome = await self._apply(tenant_id, item)
            except Exception as exc:
                result.failed += 1
                result.errors.append(
                    BulkRoleError(user_id=item.user_id, role_id=item.role_id, error=str(exc))
                )
                continue
            result.success += 1
            result.results.append(outcome)
        return result

    async def _apply(self, tenant_id: str, item: RoleUpdateItem) -> dict[str, Any]:
        if item.operation == RoleOperation.ADD.value:
            await self.add_role_to_user_in_tenant(item.user_id, tenant_id, item.role_id)
            return {"user_id": item.user_id, "role_id": item.role_id, "status": "added"}
        if item.operation == RoleOperation.REMOVE.value:
            await self.remove_role_from_user_in_tenant(item.user_id, tenant_id, item.role_id)
            return {"user_id": item.user_id, "role_id": item.role_id, "status": "removed"}
        if item.operation == RoleOperation.UPDATE.value:
            if not item.old_role_id:
                raise FieldRequiredError("old_role_id")
            return await self.update_user_tenant_role(
                item.user_id, tenant_id, item.old_role_id, item.role_id
            )
        raise FieldInvalidError("operation", item.operation, "unknown operation")
