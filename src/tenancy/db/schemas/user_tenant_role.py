"""Pydantic schemas for user roles within a tenant."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class UserTenantRoleRead(BaseModel):
    id: str
    user_id: str
    tenant_id: str
    role_id: str
    created_by: str | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class RoleGrant(BaseModel):
    role_id: str = Field(..., min_length=1, max_length=36)


class RoleChange(BaseModel):
    old_role_id: str = Field(..., min_length=1, max_length=36)
    new_role_id: str = Field(..., min_length=1, max_length=36)


class RoleOperation(str, Enum):
    ADD = "add"
    REMOVE = "remove"
    UPDATE = "update"


class RoleUpdateItem(BaseModel):
    """One entry of a bulk role update.

    operation is kept as free text so an unknown value is reported per item
    instead of rejecting the whole batch.
    """

    user_id: str
    role_id: str
    operation: str
    old_role_id: str | None = None


class BulkRoleUpdateRequest(BaseModel):
    updates: list[RoleUpdateItem] = Field(..., min_length=1)


class BulkRoleError(BaseModel):
    user_id: str
    role_id: str
    error: str


class BulkRoleUpdateResult(BaseModel):
    tenant_id: str
    total: int = 0
    success: int = 0
    failed: int = 0
    errors: list[BulkRoleError] = Field(default_factory=list)
    results: list[dict[str, Any]] = Field(default_factory=list)


class TenantUserRoles(BaseModel):
    user_id: str
    tenant_id: str
    role_ids: list[str]
