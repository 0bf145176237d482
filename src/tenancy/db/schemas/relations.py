"""Pydantic schemas for tenant relationships."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TenantGroupRelation(BaseModel):
    """Result of binding a group to a tenant."""

    tenant_id: str
    group_id: str
    added_at: datetime


class GroupRead(BaseModel):
    """Group record as returned by a GroupLookup.

    Placeholder records carry the name ``Group {id}``.
    """

    id: str
    name: str
    slug: str | None = None
    type: str | None = None
    parent_id: str | None = None
    tenant_id: str | None = None
    description: str | None = None

    model_config = ConfigDict(from_attributes=True)


class RelationRead(BaseModel):
    """Generic (tenant, other id) relationship row."""

    id: str
    tenant_id: str
    related_id: str
    created_by: str | None = None
    created_at: datetime | None = None


class RelationCreate(BaseModel):
    related_id: str = Field(..., min_length=1, max_length=36)


class GroupBind(BaseModel):
    group_id: str = Field(..., min_length=1, max_length=36)


class UserTenantBind(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=36)


class UserTenantRead(BaseModel):
    id: str
    user_id: str
    tenant_id: str
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
