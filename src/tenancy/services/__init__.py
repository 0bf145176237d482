"""Domain services for tenant administration."""

from .base import BaseService, translate_store_error
from .billing import BillingService
from .group import GroupLookup, RepositoryGroupLookup, TenantGroupService
from .quota import QuotaService
from .relations import (
    TenantDictionaryService,
    TenantMenuService,
    TenantOptionService,
    TenantRelationService,
    UserTenantService,
)
from .setting import SettingService
from .tenant import SearchIndexer, TenantService
from .user_tenant_role import UserTenantRoleService

__all__ = [
    "BaseService",
    "BillingService",
    "GroupLookup",
    "QuotaService",
    "RepositoryGroupLookup",
    "SearchIndexer",
    "SettingService",
    "TenantDictionaryService",
    "TenantGroupService",
    "TenantMenuService",
    "TenantOptionService",
    "TenantRelationService",
    "TenantService",
    "UserTenantRoleService",
    "UserTenantService",
    "translate_store_error",
]
