"""Pydantic schemas for tenant settings."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tenancy.db.models.tenant import SettingScope, SettingType


class SettingCreate(BaseModel):
    tenant_id: str | None = None
    setting_key: str = Field(default="", max_length=255)
    setting_name: str | None = Field(None, max_length=255)
    setting_value: str | None = None
    default_value: str | None = None
    setting_type: SettingType = SettingType.STRING
    scope: SettingScope = SettingScope.TENANT
    category: str | None = Field(None, max_length=100)
    description: str | None = None
    is_public: bool = False
    is_required: bool = False
    is_readonly: bool = False
    validation: dict[str, Any] = Field(default_factory=dict)
    extras: dict[str, Any] = Field(default_factory=dict)


class SettingUpdate(BaseModel):
    setting_name: str | None = Field(None, max_length=255)
    setting_value: str | None = None
    default_value: str | None = None
    setting_type: SettingType | None = None
    scope: SettingScope | None = None
    category: str | None = None
    description: str | None = None
    is_public: bool | None = None
    is_required: bool | None = None
    is_readonly: bool | None = None
    validation: dict[str, Any] | None = None
    extras: dict[str, Any] | None = None


class SettingRead(BaseModel):
    """Stored setting plus its value coerced to setting_type."""

    id: str
    tenant_id: str
    setting_key: str
    setting_name: str
    setting_value: str | None = None
    default_value: str | None = None
    setting_type: SettingType
    scope: SettingScope
    category: str | None = None
    description: str | None = None
    is_public: bool
    is_required: bool
    is_readonly: bool
    validation: dict[str, Any] = Field(default_factory=dict)
    extras: dict[str, Any] = Field(default_factory=dict)
    typed_value: Any = None
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("validation", "extras", mode="before")
    @classmethod
    def default_dict(cls, v: Any) -> Any:
        return v or {}


class SettingValueRequest(BaseModel):
    """Raw value for set_setting; non-string values are stored as JSON text."""

    value: Any


class BulkSettingsRequest(BaseModel):
    settings: dict[str, Any] = Field(..., min_length=1)
