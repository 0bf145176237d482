"""Tenant setting endpoints.

Values are addressed by setting key under a tenant. /bulk and /values are
declared before /{key} so they are not captured as keys.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Query, status

from tenancy.api.dependencies import Paging, TenantId, TenantSettings
from tenancy.api.schemas.envelope import Envelope, ok, paged
from tenancy.db.models.tenant import SettingScope
from tenancy.db.schemas.setting import (
    BulkSettingsRequest,
    SettingCreate,
    SettingRead,
    SettingValueRequest,
)

router = APIRouter(prefix="/tenants/{tenant}/settings", tags=["settings"])


@router.get("", response_model=Envelope, summary="List tenant settings")
async def list_settings(
    tenant_id: TenantId,
    settings: TenantSettings,
    paging: Paging,
    scope: Annotated[SettingScope | None, Query()] = None,
    category: Annotated[str | None, Query()] = None,
    is_public: Annotated[bool | None, Query()] = None,
) -> Envelope:
    page = await settings.list_settings(
        paging, tenant_id=tenant_id, scope=scope, category=category, is_public=is_public
    )
    return paged(page)


@router.post(
    "",
    response_model=Envelope[SettingRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create a setting",
)
async def create_setting(
    tenant_id: TenantId, body: SettingCreate, settings: TenantSettings
) -> Envelope[SettingRead]:
    return ok(await settings.create(body.model_copy(update={"tenant_id": tenant_id})))


@router.put(
    "/bulk",
    response_model=Envelope[list[SettingRead]],
    summary="Set several values at once",
)
async def bulk_update_settings(
    tenant_id: TenantId, body: BulkSettingsRequest, settings: TenantSettings
) -> Envelope[list[SettingRead]]:
    return ok(await settings.bulk_update(tenant_id, body.settings))


@router.get(
    "/values",
    response_model=Envelope[dict[str, Any]],
    summary="Typed values keyed by setting key",
)
async def setting_values(
    tenant_id: TenantId,
    settings: TenantSettings,
    public_only: Annotated[bool, Query()] = False,
) -> Envelope[dict[str, Any]]:
    return ok(await settings.get_tenant_settings(tenant_id, public_only=public_only))


@router.get("/{key}", response_model=Envelope[SettingRead], summary="Get a setting")
async def get_setting(
    tenant_id: TenantId, key: str, settings: TenantSettings
) -> Envelope[SettingRead]:
    return ok(await settings.get_by_key(tenant_id, key))


@router.put("/{key}", response_model=Envelope[SettingRead], summary="Set a setting value")
async def set_setting(
    tenant_id: TenantId, key: str, body: SettingValueRequest, settings: TenantSettings
) -> Envelope[SettingRead]:
    return ok(await settings.set_setting(tenant_id, key, body.value))


@router.delete("/{key}", response_model=Envelope, summary="Delete a setting")
async def delete_setting(tenant_id: TenantId, key: str, settings: TenantSettings) -> Envelope:
    setting = await settings.get_by_key(tenant_id, key)
    await settings.delete(setting.id)
    return ok()
