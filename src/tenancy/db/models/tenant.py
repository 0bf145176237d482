"""Tenant, quota, billing and setting models."""

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import BigInteger, Boolean, Float, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, IdMixin, PortableJSON, ProvenanceMixin, UTCDateTime


class Tenant(IdMixin, ProvenanceMixin, Base):
    """Tenant (customer organization), the top-level isolation unit.

    The slug is the external identifier. The bootstrap tenant created by
    system initialization uses the slug ``ncobase``.
    """

    __tablename__ = "tenants"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False, default="private")

    # Branding
    title: Mapped[str | None] = mapped_column(String(255))
    url: Mapped[str | None] = mapped_column(String(512))
    logo: Mapped[str | None] = mapped_column(String(512))
    logo_alt: Mapped[str | None] = mapped_column(String(255))
    keywords: Mapped[str | None] = mapped_column(String(512))
    copyright: Mapped[str | None] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text)

    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    disabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    extras: Mapped[dict[str, Any] | None] = mapped_column(PortableJSON, default=dict)
    expired_at: Mapped[datetime | None] = mapped_column(UTCDateTime)

    __table_args__ = (Index("idx_tenant_type", "type"),)

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, slug={self.slug})>"


class QuotaType(str, Enum):
    USERS = "users"
    STORAGE = "storage"
    API_CALLS = "api_calls"
    PROJECTS = "projects"
    CUSTOM = "custom"


class QuotaUnit(str, Enum):
    COUNT = "count"
    BYTES = "bytes"
    MB = "mb"
    GB = "gb"
    TB = "tb"


class TenantQuota(IdMixin, ProvenanceMixin, Base):
    """Capped resource counter for a tenant; one row per (tenant, type)."""

    __tablename__ = "tenant_quotas"

    tenant_id: Mapped[str] = mapped_column(String(36), nullable=False)
    quota_type: Mapped[str] = mapped_column(String(50), nullable=False)
    quota_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    max_value: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    current_used: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    unit: Mapped[str] = mapped_column(String(20), nullable=False, default=QuotaUnit.COUNT.value)
    description: Mapped[str | None] = mapped_column(Text)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    extras: Mapped[dict[str, Any] | None] = mapped_column(PortableJSON, default=dict)

    __table_args__ = (
        UniqueConstraint("tenant_id", "quota_type", name="uq_tenant_quota_type"),
        Index("idx_tenant_quota_tenant", "tenant_id"),
    )

    def __repr__(self) -> str:
        return f"<TenantQuota(tenant={self.tenant_id}, type={self.quota_type})>"


class BillingPeriod(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"
    ONE_TIME = "one_time"
    USAGE_BASED = "usage_based"


class BillingStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class TenantBilling(IdMixin, ProvenanceMixin, Base):
    """Invoice-level billing record for a tenant."""

    __tablename__ = "tenant_billing"

    tenant_id: Mapped[str] = mapped_column(String(36), nullable=False)
    billing_period: Mapped[str] = mapped_column(
        String(20), nullable=False, default=BillingPeriod.MONTHLY.value
    )
    period_start: Mapped[datetime | None] = mapped_column(UTCDateTime)
    period_end: Mapped[datetime | None] = mapped_column(UTCDateTime)
    amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=BillingStatus.PENDING.value
    )
    description: Mapped[str | None] = mapped_column(Text)
    invoice_number: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    payment_method: Mapped[str | None] = mapped_column(String(50))
    paid_at: Mapped[datetime | None] = mapped_column(UTCDateTime)
    due_date: Mapped[datetime | None] = mapped_column(UTCDateTime)
    usage_details: Mapped[dict[str, Any] | None] = mapped_column(PortableJSON, default=dict)
    extras: Mapped[dict[str, Any] | None] = mapped_column(PortableJSON, default=dict)

    __table_args__ = (
        Index("idx_tenant_billing_tenant", "tenant_id"),
        Index("idx_tenant_billing_status_due", "status", "due_date"),
    )

    def __repr__(self) -> str:
        return f"<TenantBilling(invoice={self.invoice_number}, status={self.status})>"


class SettingType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    JSON = "json"
    ARRAY = "array"


class SettingScope(str, Enum):
    SYSTEM = "system"
    TENANT = "tenant"
    USER = "user"
    FEATURE = "feature"


class TenantSetting(IdMixin, ProvenanceMixin, Base):
    """Typed key/value setting for a tenant; one row per (tenant, key)."""

    __tablename__ = "tenant_settings"

    tenant_id: Mapped[str] = mapped_column(String(36), nullable=False)
    setting_key: Mapped[str] = mapped_column(String(255), nullable=False)
    setting_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    setting_value: Mapped[str | None] = mapped_column(Text)
    default_value: Mapped[str | None] = mapped_column(Text)
    setting_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SettingType.STRING.value
    )
    scope: Mapped[str] = mapped_column(String(20), nullable=False, default=SettingScope.TENANT.value)
    category: Mapped[str | None] = mapped_column(String(100))
    description: Mapped[str | None] = mapped_column(Text)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_readonly: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    validation: Mapped[dict[str, Any] | None] = mapped_column(PortableJSON, default=dict)
    extras: Mapped[dict[str, Any] | None] = mapped_column(PortableJSON, default=dict)

    __table_args__ = (
        UniqueConstraint("tenant_id", "setting_key", name="uq_tenant_setting_key"),
        Index("idx_tenant_setting_tenant", "tenant_id"),
    )

    def __repr__(self) -> str:
        return f"<TenantSetting(tenant={self.tenant_id}, key={self.setting_key})>"
