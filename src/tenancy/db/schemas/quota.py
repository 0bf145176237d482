"""Pydantic schemas for tenant quotas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from tenancy.db.models.tenant import QuotaType, QuotaUnit


class QuotaCreate(BaseModel):
    """Schema for creating a quota.

    tenant_id is taken from the route when the quota is created under a
    tenant path.
    """

    tenant_id: str | None = None
    quota_type: QuotaType | None = None
    quota_name: str = Field(default="", max_length=255)
    max_value: int = Field(default=0, ge=0)
    current_used: int = Field(default=0, ge=0)
    unit: QuotaUnit = QuotaUnit.COUNT
    description: str | None = None
    enabled: bool = True
    extras: dict[str, Any] = Field(default_factory=dict)


class QuotaUpdate(BaseModel):
    """Absolute update of a quota; only set fields are applied."""

    quota_name: str | None = Field(None, max_length=255)
    max_value: int | None = Field(None, ge=0)
    current_used: int | None = Field(None, ge=0)
    unit: QuotaUnit | None = None
    description: str | None = None
    enabled: bool | None = None
    extras: dict[str, Any] | None = None


class QuotaRead(BaseModel):
    """Quota with derived utilization fields."""

    id: str
    tenant_id: str
    quota_type: QuotaType
    quota_name: str
    max_value: int
    current_used: int
    unit: QuotaUnit
    description: str | None = None
    enabled: bool
    extras: dict[str, Any] = Field(default_factory=dict)
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
    def utilization_percent(self) -> float:
        if self.max_value <= 0:
            return 0.0
        return self.current_used / self.max_value * 100

    @computed_field
    @property
    def is_exceeded(self) -> bool:
        return self.current_used > self.max_value

    @computed_field
    @property
    def remaining(self) -> int:
        return max(self.max_value - self.current_used, 0)


class QuotaCheckRequest(BaseModel):
    quota_type: QuotaType
    amount: int = Field(..., ge=0)


class QuotaCheckResponse(BaseModel):
    tenant_id: str
    quota_type: QuotaType
    amount: int
    allowed: bool


class QuotaUsageRequest(BaseModel):
    """Usage delta; negative values release usage."""

    quota_type: QuotaType
    delta: int
