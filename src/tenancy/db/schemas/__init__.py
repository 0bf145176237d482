"""Pydantic schemas for API validation."""

from .billing import (
    BillingCreate,
    BillingRead,
    BillingSummary,
    BillingUpdate,
    InvoiceRequest,
    MarkOverdueResult,
    PaymentRequest,
)
from .initialize import InitializeRequest, InitState, StepStatus
from .quota import (
    QuotaCheckRequest,
    QuotaCheckResponse,
    QuotaCreate,
    QuotaRead,
    QuotaUpdate,
    QuotaUsageRequest,
)
from .relations import (
    GroupBind,
    GroupRead,
    RelationCreate,
    RelationRead,
    TenantGroupRelation,
    UserTenantBind,
    UserTenantRead,
)
from .setting import (
    BulkSettingsRequest,
    SettingCreate,
    SettingRead,
    SettingUpdate,
    SettingValueRequest,
)
from .tenant import TenantCreate, TenantRead, TenantUpdate
from .user_tenant_role import (
    BulkRoleError,
    BulkRoleUpdateRequest,
    BulkRoleUpdateResult,
    RoleChange,
    RoleGrant,
    RoleOperation,
    RoleUpdateItem,
    TenantUserRoles,
    UserTenantRoleRead,
)

__all__ = [
    "BillingCreate",
    "BillingRead",
    "BillingSummary",
    "BillingUpdate",
    "BulkRoleError",
    "BulkRoleUpdateRequest",
    "BulkRoleUpdateResult",
    "BulkSettingsRequest",
    "GroupBind",
    "GroupRead",
    "InitState",
    "InitializeRequest",
    "InvoiceRequest",
    "MarkOverdueResult",
    "PaymentRequest",
    "QuotaCheckRequest",
    "QuotaCheckResponse",
    "QuotaCreate",
    "QuotaRead",
    "QuotaUpdate",
    "QuotaUsageRequest",
    "RelationCreate",
    "RelationRead",
    "RoleChange",
    "RoleGrant",
    "RoleOperation",
    "RoleUpdateItem",
    "SettingCreate",
    "SettingRead",
    "SettingUpdate",
    "SettingValueRequest",
    "StepStatus",
    "TenantCreate",
    "TenantGroupRelation",
    "TenantRead",
    "TenantUpdate",
    "TenantUserRoles",
    "UserTenantBind",
    "UserTenantRead",
]
