"""Typed tenant settings."""

import json
from typing import Any

from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.config.settings import Settings
from tenancy.core.cache import CacheTaskRunner
from tenancy.core.exceptions import (
    AlreadyExistsError,
    FieldRequiredError,
    NotFoundError,
    SettingReadOnlyError,
)
from tenancy.core.paging import Page, PageParams
from tenancy.db.models.tenant import SettingScope, SettingType, TenantSetting
from tenancy.db.repositories import SettingRepository
from tenancy.db.schemas.setting import SettingCreate, SettingRead, SettingUpdate

from .base import BaseService

TRUE_VALUES = frozenset({"true", "1", "yes", "on"})
FALSE_VALUES = frozenset({"false", "0", "no", "off"})


def to_setting_text(value: Any) -> str | None:
    """Render a value for storage: strings as is, anything else as JSON."""
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value)


def coerce_setting_value(raw: str | None, setting_type: str, default: str | None = None) -> Any:
    """Convert a stored string to the value its setting_type declares.

    An empty value falls back to default. When the text cannot be
    converted the raw string is returned unchanged.
    """
    if raw is None or raw == "":
        raw = default
    if raw is None:
        return None

    if setting_type == SettingType.NUMBER.value:
        try:
            return int(raw)
        except ValueError:
            try:
                return float(raw)
            except ValueError:
                return raw
    if setting_type == SettingType.BOOLEAN.value:
        lowered = raw.strip().lower()
        if lowered in TRUE_VALUES:
            return True
        if lowered in FALSE_VALUES:
            return False
        return raw
    if setting_type in (SettingType.JSON.value, SettingType.ARRAY.value):
        try:
            return json.loads(raw)
        except ValueError:
            return raw
    return raw


class SettingService(BaseService):
    """Service for tenant settings.

    Values are stored as text and coerced on read according to
    setting_type. Read-only settings reject every value write.
    """

    entity_name = "TenantSetting"

    def __init__(
        self,
        db: AsyncSession,
        redis: Redis | None = None,
        *,
        settings: Settings | None = None,
        runner: CacheTaskRunner | None = None,
    ):
        super().__init__(db, redis, settings=settings, runner=runner)
        ttl = self.settings.cache_ttl.setting
        self.repo = SettingRepository(db, self.namespace("setting", ttl), ttl=ttl, runner=runner)

    async def create(self, body: SettingCreate) -> SettingRead:
        """Create a setting.

        Raises:
            FieldRequiredError: If tenant_id or setting_key is missing
            AlreadyExistsError: If the key already exists for the tenant
        """
        if not body.tenant_id:
            raise FieldRequiredError("tenant_id")
        if not body.setting_key:
            raise FieldRequiredError("setting_key")
        key = f"{body.tenant_id}:{body.setting_key}"
        if await self.repo.get_for_update(body.tenant_id, body.setting_key) is not None:
            raise AlreadyExistsError(self.entity_name, key)

        values = body.model_dump(mode="json")
        values["setting_name"] = values["setting_name"] or body.setting_key
        async with self.store_errors("create", key):
            setting = await self.repo.create(TenantSetting(**values))
        return self.serialize(setting)

    async def get(self, setting_id: str) -> SettingRead:
        setting = await self.repo.get_cached(setting_id)
        if setting is None:
            raise NotFoundError(self.entity_name, setting_id)
        return self.serialize(setting)

    async def get_by_key(self, tenant_id: str, key: str) -> SettingRead:
        setting = await self.repo.get_by_key(tenant_id, key)
        if setting is None:
            raise NotFoundError(self.entity_name, f"{tenant_id}:{key}")
        return self.serialize(setting)

    async def update(self, setting_id: str, body: SettingUpdate) -> SettingRead:
        """Update metadata and value of a setting.

        Raises:
            SettingReadOnlyError: If the row is read-only and the value changes
        """
        setting = await self.repo.get(setting_id)
        if setting is None:
            raise NotFoundError(self.entity_name, setting_id)
        updates = body.model_dump(mode="json", exclude_unset=True)
        if (
            setting.is_readonly
            and "setting_value" in updates
            and updates["setting_value"] != setting.setting_value
        ):
            raise SettingReadOnlyError(setting.tenant_id, setting.setting_key)
        async with self.store_errors("update", setting_id):
            setting = await self.repo.update(setting, updates)
        return self.serialize(setting)

    async def delete(self, setting_id: str) -> None:
        setting = await self.repo.get(setting_id)
        if setting is None:
            raise NotFoundError(self.entity_name, setting_id)
        async with self.store_errors("delete", setting_id):
            await self.repo.delete(setting)

    async def list_settings(
        self,
        params: PageParams | None = None,
        *,
        tenant_id: str | None = None,
        scope: SettingScope | None = None,
        category: str | None = None,
        is_public: bool | None = None,
    ) -> Page[SettingRead]:
        page = await self.repo.list_page(
            self.page_params(params),
            tenant_id=tenant_id,
            scope=scope.value if scope else None,
            category=category,
            is_public=is_public,
        )
        return page.map(self.serialize)

    async def set_setting(self, tenant_id: str, key: str, value: Any) -> SettingRead:
        """Insert or overwrite the value of key for tenant_id.

        New rows are string settings in tenant scope named after the key.

        Raises:
            FieldRequiredError: If tenant_id or key is empty
            SettingReadOnlyError: If the existing row is read-only
        """
        if not tenant_id:
            raise FieldRequiredError("tenant_id")
        if not key:
            raise FieldRequiredError("setting_key")
        text = to_setting_text(value)

        setting = await self.repo.get_for_update(tenant_id, key)
        if setting is None:
            async with self.store_errors("set_setting", f"{tenant_id}:{key}"):
                setting = await self.repo.create(
                    TenantSetting(
                        tenant_id=tenant_id,
                        setting_key=key,
                        setting_name=key,
                        setting_value=text,
                        setting_type=SettingType.STRING.value,
                        scope=SettingScope.TENANT.value,
                    )
                )
            return self.serialize(setting)

        if setting.is_readonly:
            raise SettingReadOnlyError(tenant_id, key)
        async with self.store_errors("set_setting", f"{tenant_id}:{key}"):
            setting = await self.repo.update(setting, {"setting_value": text})
        return self.serialize(setting)

    async def bulk_update(self, tenant_id: str, values: dict[str, Any]) -> list[SettingRead]:
        """Apply set_setting for each key; stops at the first failure."""
        return [await self.set_setting(tenant_id, key, value) for key, value in values.items()]

    async def get_setting_value(self, tenant_id: str, key: str) -> Any:
        setting = await self.repo.get_by_key(tenant_id, key)
        if setting is None:
            raise NotFoundError(self.entity_name, f"{tenant_id}:{key}")
        return coerce_setting_value(
            setting.setting_value, setting.setting_type, setting.default_value
        )

    async def get_tenant_settings(
        self, tenant_id: str, *, public_only: bool = False
    ) -> dict[str, Any]:
        """Map of setting_key to typed value for the tenant."""
        rows = await self.repo.list_by_tenant(tenant_id, public_only=public_only)
        return {
            row.setting_key: coerce_setting_value(
                row.setting_value, row.setting_type, row.default_value
            )
            for row in rows
        }

    def serialize(self, setting: TenantSetting) -> SettingRead:
        read = SettingRead.model_validate(setting)
        read.typed_value = coerce_setting_value(
            setting.setting_value, setting.setting_type, setting.default_value
        )
        return read
