"""Database models for tenancy."""

from .base import Base, IdMixin, PortableJSON, ProvenanceMixin, TimestampMixin, UTCDateTime
from .relations import (
    TenantDictionary,
    TenantGroup,
    TenantMenu,
    TenantOption,
    UserTenant,
    UserTenantRole,
)
from .system import Group, Menu, Permission, PolicyRule, Role, RolePermission, SystemOption, User
from .tenant import (
    BillingPeriod,
    BillingStatus,
    QuotaType,
    QuotaUnit,
    SettingScope,
    SettingType,
    Tenant,
    TenantBilling,
    TenantQuota,
    TenantSetting,
)

__all__ = [
    "Base",
    "IdMixin",
    "PortableJSON",
    "ProvenanceMixin",
    "TimestampMixin",
    "UTCDateTime",
    "Tenant",
    "TenantQuota",
    "QuotaType",
    "QuotaUnit",
    "TenantBilling",
    "BillingPeriod",
    "BillingStatus",
    "TenantSetting",
    "SettingType",
    "SettingScope",
    "TenantGroup",
    "TenantMenu",
    "TenantDictionary",
    "TenantOption",
    "UserTenant",
    "UserTenantRole",
    "Role",
    "Permission",
    "RolePermission",
    "PolicyRule",
    "User",
    "Menu",
    "Group",
    "SystemOption",
]
