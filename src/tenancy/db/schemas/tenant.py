"""Pydantic schemas for tenant API validation."""

import re
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

# Slug validation pattern: lowercase alphanumeric with hyphens
SLUG_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]*[a-z0-9]$|^[a-z0-9]$")


def slugify(value: str) -> str:
    """Derive a slug from a display name."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return re.sub(r"-{2,}", "-", slug)


def _check_slug(v: str) -> str:
    v = v.lower().strip()
    if not SLUG_PATTERN.match(v):
        raise ValueError(
            "Slug must be lowercase alphanumeric with hyphens, cannot start or end with hyphen"
        )
    if "--" in v:
        raise ValueError("Slug cannot contain consecutive hyphens")
    return v


class TenantBase(BaseModel):
    type: str = Field(default="private", max_length=50)
    title: str | None = Field(None, max_length=255)
    url: str | None = Field(None, max_length=512)
    logo: str | None = Field(None, max_length=512)
    logo_alt: str | None = Field(None, max_length=255)
    keywords: str | None = Field(None, max_length=512)
    copyright: str | None = Field(None, max_length=255)
    description: str | None = None
    order: int = 0
    disabled: bool = False
    extras: dict[str, Any] = Field(default_factory=dict)
    expired_at: datetime | None = None


class TenantCreate(TenantBase):
    """Schema for creating a new tenant.

    The slug is derived from the name when omitted.
    """

    name: str = Field(default="", max_length=255, description="Tenant display name")
    slug: str | None = Field(
        None,
        max_length=100,
        description="URL-safe identifier (lowercase alphanumeric with hyphens)",
    )

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return _check_slug(v)


class TenantUpdate(BaseModel):
    """Schema for updating an existing tenant. Only set fields are applied."""

    name: str | None = Field(None, min_length=1, max_length=255)
    slug: str | None = Field(None, min_length=1, max_length=100)
    type: str | None = Field(None, max_length=50)
    title: str | None = None
    url: str | None = None
    logo: str | None = None
    logo_alt: str | None = None
    keywords: str | None = None
    copyright: str | None = None
    description: str | None = None
    order: int | None = None
    disabled: bool | None = None
    extras: dict[str, Any] | None = None
    expired_at: datetime | None = None

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _check_slug(v)


class TenantRead(TenantBase):
    """Schema for tenant API responses."""

    id: str
    name: str
    slug: str
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("extras", mode="before")
    @classmethod
    def default_extras(cls, v: Any) -> Any:
        return v or {}

    @computed_field
    @property
    def is_expired(self) -> bool:
        return self.expired_at is not None and self.expired_at <= datetime.now(UTC)
