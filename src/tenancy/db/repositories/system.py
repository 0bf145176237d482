"""Repositories for the tables populated by system initialization.

These rows are written once by the seed sequence and read rarely, so they
are not cached.
"""

from tenancy.db.models.system import (
    Group,
    Menu,
    Permission,
    PolicyRule,
    Role,
    RolePermission,
    SystemOption,
    User,
)

from .base import BaseRepository


class RoleRepository(BaseRepository[Role]):
    entity_name = "Role"

    async def get_by_slug(self, slug: str) -> Role | None:
        return await self.find_one(Role.slug == slug)


class PermissionRepository(BaseRepository[Permission]):
    entity_name = "Permission"

    async def get_by_name(self, name: str) -> Permission | None:
        return await self.find_one(Permission.name == name)


class RolePermissionRepository(BaseRepository[RolePermission]):
    entity_name = "RolePermission"

    async def permission_ids(self, role_id: str) -> list[str]:
        rows = await self.find_all(RolePermission.role_id == role_id)
        return [row.permission_id for row in rows]


class PolicyRuleRepository(BaseRepository[PolicyRule]):
    entity_name = "PolicyRule"

    async def list_for_domain(self, domain: str) -> list[PolicyRule]:
        return await self.find_all(PolicyRule.v1 == domain)


class UserRepository(BaseRepository[User]):
    entity_name = "User"

    async def get_by_username(self, username: str) -> User | None:
        return await self.find_one(User.username == username)


class MenuRepository(BaseRepository[Menu]):
    entity_name = "Menu"

    async def get_by_slug(self, slug: str) -> Menu | None:
        return await self.find_one(Menu.slug == slug)


class GroupRepository(BaseRepository[Group]):
    entity_name = "Group"

    async def get_by_slug(self, slug: str) -> Group | None:
        return await self.find_one(Group.slug == slug)

    async def list_by_tenant(self, tenant_id: str) -> list[Group]:
        return await self.find_all(Group.tenant_id == tenant_id)


class SystemOptionRepository(BaseRepository[SystemOption]):
    entity_name = "SystemOption"

    async def get_by_name(self, name: str) -> SystemOption | None:
        return await self.find_one(SystemOption.name == name)

    async def put(self, name: str, value: str, *, type: str = "string") -> SystemOption:
        """Insert or overwrite the option called name."""
        option = await self.get_by_name(name)
        if option is None:
            return await self.create(SystemOption(name=name, type=type, value=value))
        return await self.update(option, {"value": value, "type": type})
