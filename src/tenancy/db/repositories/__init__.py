"""Data access layer: cache-aside repositories over SQLAlchemy models."""

from .base import BaseRepository, CachedRepository
from .billing import BillingRepository
from .quota import QuotaRepository
from .relations import (
    RelationRepository,
    TenantDictionaryRepository,
    TenantGroupRepository,
    TenantMenuRepository,
    TenantOptionRepository,
    UserTenantRepository,
)
from .setting import SettingRepository
from .system import (
    GroupRepository,
    MenuRepository,
    PermissionRepository,
    PolicyRuleRepository,
    RolePermissionRepository,
    RoleRepository,
    SystemOptionRepository,
    UserRepository,
)
from .tenant import TenantRepository
from .user_tenant_role import UserTenantRoleRepository

__all__ = [
    "BaseRepository",
    "BillingRepository",
    "CachedRepository",
    "GroupRepository",
    "MenuRepository",
    "PermissionRepository",
    "PolicyRuleRepository",
    "QuotaRepository",
    "RelationRepository",
    "RolePermissionRepository",
    "RoleRepository",
    "SettingRepository",
    "SystemOptionRepository",
    "TenantDictionaryRepository",
    "TenantGroupRepository",
    "TenantMenuRepository",
    "TenantOptionRepository",
    "TenantRepository",
    "UserRepository",
    "UserTenantRepository",
    "UserTenantRoleRepository",
]
