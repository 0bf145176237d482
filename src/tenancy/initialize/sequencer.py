"""System seed sequence.

Runs a fixed, ordered list of seed steps on first boot:

    roles -> permissions -> tenants -> users -> menus -> casbin_policies
    -> organizations

Each step counts its target table first and does nothing when rows are
already present, so execute() can be retried after a failure. Steps commit
independently: when one fails, the earlier steps stay committed and the
failure is recorded in the persisted state.
"""

import json
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy import __version__
from tenancy.config.settings import Settings
from tenancy.core.cache import CacheTaskRunner
from tenancy.core.exceptions import (
    AlreadyInitializedError,
    InitializationStepError,
    NotFoundError,
    ReinitializationNotAllowedError,
)
from tenancy.core.logging import LogContext, get_logger
from tenancy.core.passwords import hash_password
from tenancy.db.models import (
    Group,
    Menu,
    Permission,
    PolicyRule,
    Role,
    RolePermission,
    Tenant,
    User,
)
from tenancy.db.repositories import (
    GroupRepository,
    MenuRepository,
    PermissionRepository,
    PolicyRuleRepository,
    RolePermissionRepository,
    RoleRepository,
    SystemOptionRepository,
    TenantGroupRepository,
    TenantMenuRepository,
    TenantRepository,
    UserRepository,
    UserTenantRepository,
    UserTenantRoleRepository,
)
from tenancy.db.schemas.initialize import InitState, StepStatus
from tenancy.services.base import BaseService

from . import data

logger = get_logger(__name__)

STATE_OPTION_KEY = "system.initialization.state"

STATUS_INITIALIZED = "initialized"
STATUS_SKIPPED = "skipped"
STATUS_FAILED = "failed"


class SystemInitializer(BaseService):
    """Seeds default roles, permissions, tenant, users, menus, policies and groups.

    Args:
        db: Async SQLAlchemy session
        redis: Redis client for the cached repositories
        settings: Application settings; ``settings.initialization`` drives
            reinitialization and state persistence
        runner: Background runner for cache invalidation
    """

    entity_name = "Initialization"

    def __init__(
        self,
        db: AsyncSession,
        redis: Redis | None = None,
        *,
        settings: Settings | None = None,
        runner: CacheTaskRunner | None = None,
    ):
        super().__init__(db, redis, settings=settings, runner=runner)
        self.config = self.settings.initialization
        ttl = self.settings.cache_ttl

        self.roles = RoleRepository(db)
        self.permissions = PermissionRepository(db)
        self.role_permissions = RolePermissionRepository(db)
        self.policies = PolicyRuleRepository(db)
        self.users = UserRepository(db)
        self.menus = MenuRepository(db)
        self.groups = GroupRepository(db)
        self.options = SystemOptionRepository(db)
        self.tenants = TenantRepository(
            db, self.namespace("tenant", ttl.tenant), ttl=ttl.tenant, runner=runner
        )
        self.user_tenants = UserTenantRepository(
            db, self.namespace("user_tenant", ttl.relation), ttl=ttl.relation, runner=runner
        )
        self.user_tenant_roles = UserTenantRoleRepository(
            db,
            self.namespace("user_tenant_role", ttl.user_tenant_role),
            ttl=ttl.user_tenant_role,
            runner=runner,
        )
        self.tenant_menus = TenantMenuRepository(
            db, self.namespace("tenant_menu", ttl.relation), ttl=ttl.relation, runner=runner
        )
        self.tenant_groups = TenantGroupRepository(
            db, self.namespace("tenant_group", ttl.relation), ttl=ttl.relation, runner=runner
        )

    @property
    def steps(self) -> list[tuple[str, Callable[[], Awaitable[bool]]]]:
        """Seed steps in execution order.

        Each step returns True when it wrote rows and False when it skipped.
        """
        return [
            ("roles", self._seed_roles),
            ("permissions", self._seed_permissions),
            ("tenants", self._seed_tenants),
            ("users", self._seed_users),
            ("menus", self._seed_menus),
            ("casbin_policies", self._seed_policies),
            ("organizations", self._seed_organization),
        ]

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    async def get_state(self) -> InitState:
        """Current initialization state, from the stored option when persisted."""
        if self.config.persist_state:
            option = await self.options.get_by_name(STATE_OPTION_KEY)
            if option is not None and option.value:
                return InitState.model_validate(json.loads(option.value))
        return InitState(version=__version__)

    async def save_state(self, state: InitState) -> None:
        if not self.config.persist_state:
            return
        await self.options.put(STATE_OPTION_KEY, state.model_dump_json(), type="object")

    async def is_initialized(self, state: InitState | None = None) -> bool:
        """Whether the stored state says so.

        Without any recorded run, a database that already has users counts as
        initialized. A recorded run that failed or was reset does not.
        """
        state = state or await self.get_state()
        if state.is_initialized:
            return True
        if state.last_run_time is not None:
            return False
        if await self.users.count() > 0:
            state.is_initialized = True
            await self._save_quietly(state)
            return True
        return False

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def execute(self, allow_reinitialization: bool | None = None) -> InitState:
        """Run every seed step in order.

        Args:
            allow_reinitialization: Run even when already initialized;
                defaults to the configured value

        Returns:
            The resulting state with one status per step

        Raises:
            AlreadyInitializedError: If initialized and reinitialization is not allowed
            InitializationStepError: If a step fails; its error is in the saved state
        """
        if allow_reinitialization is None:
            allow_reinitialization = self.config.allow_reinitialization

        state = await self.get_state()
        if await self.is_initialized(state) and not allow_reinitialization:
            logger.info("system_already_initialized")
            raise AlreadyInitializedError()

        failed = [s.component for s in state.statuses if s.status == STATUS_FAILED]
        logger.info("system_initialization_started", resuming_after=failed or None)
        state.statuses = []
        state.version = __version__
        for name, step in self.steps:
            try:
                with LogContext(step=name):
                    wrote = await step()
            except Exception as exc:
                await self.db.rollback()
                state.statuses.append(StepStatus(component=name, status=STATUS_FAILED, error=str(exc)))
                state.last_run_time = datetime.now(UTC)
                await self._save_quietly(state)
                logger.error("initialization_step_failed", step=name, error=str(exc))
                raise InitializationStepError(name, exc) from exc

            status = STATUS_INITIALIZED if wrote else STATUS_SKIPPED
            state.statuses.append(StepStatus(component=name, status=status))
            logger.info("initialization_step_completed", step=name, status=status)

        state.is_initialized = True
        state.last_run_time = datetime.now(UTC)
        await self._save_quietly(state)
        logger.info("system_initialization_completed")
        return state

    async def reset_initialization(self) -> InitState:
        """Clear the stored state so execute() may run again.

        Seeded rows are kept.

        Raises:
            ReinitializationNotAllowedError: If configuration forbids it
        """
        if not self.config.allow_reinitialization:
            raise ReinitializationNotAllowedError()
        logger.warning("system_initialization_reset")
        state = InitState(
            is_initialized=False, last_run_time=datetime.now(UTC), version=__version__
        )
        await self._save_quietly(state)
        return state

    async def _save_quietly(self, state: InitState) -> None:
        try:
            await self.save_state(state)
        except Exception as exc:
            logger.warning("initialization_state_save_failed", error=str(exc))

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _seed_roles(self) -> bool:
        if await self.roles.count() > 0:
            return False
        for role in data.DEFAULT_ROLES:
            await self.roles.create(Role(**role), commit=False)
        await self.db.commit()
        return True

    async def _seed_permissions(self) -> bool:
        if await self.permissions.count() > 0:
            return False
        by_name: dict[str, Permission] = {}
        for body in data.DEFAULT_PERMISSIONS:
            by_name[body["name"]] = await self.permissions.create(Permission(**body), commit=False)
        await self._grant(data.ROLE_PERMISSIONS, by_name)
        await self.db.commit()
        return True

    async def _seed_tenants(self) -> bool:
        if await self.tenants.count() > 0:
            return False
        await self.tenants.create(
            Tenant(
                name=self.config.default_tenant_name,
                slug=self.config.default_tenant_slug,
                title=self.config.default_tenant_name,
                type="private",
                extras={},
            )
        )
        return True

    async def _seed_users(self) -> bool:
        if await self.users.count() > 0:
            return False
        tenant = await self._default_tenant()
        password = self.config.default_password.get_secret_value()
        for info in data.DEFAULT_USERS:
            user = await self.users.create(
                User(
                    username=info.username,
                    email=info.email,
                    phone=info.phone,
                    password_hash=hash_password(
                        password, rounds=self.config.password_hash_rounds
                    ),
                    is_admin=info.is_admin,
                    is_certified=info.is_certified,
                ),
                commit=False,
            )
            role = await self._role(info.role)
            await self.user_tenants.add(user.id, tenant.id)
            await self.user_tenant_roles.add(user.id, tenant.id, role.id)
            logger.debug("seed_user_created", username=info.username, role=info.role)
        return True

    async def _seed_menus(self) -> bool:
        if await self.menus.count() > 0:
            return False
        tenant = await self._default_tenant()
        ids: dict[str, str] = {}
        # Parents are listed before their children
        for item in data.DEFAULT_MENUS:
            parent_id = None
            if item.parent is not None:
                if item.parent not in ids:
                    logger.warning("seed_menu_parent_missing", menu=item.slug, parent=item.parent)
                    continue
                parent_id = ids[item.parent]
            menu = await self.menus.create(
                Menu(
                    name=item.name,
                    slug=item.slug,
                    type=item.type,
                    path=item.path,
                    icon=item.icon,
                    perms=item.perms,
                    parent_id=parent_id,
                    order=item.order,
                ),
                commit=False,
            )
            ids[item.slug] = menu.id
        await self.db.commit()
        for menu_id in ids.values():
            await self.tenant_menus.add(tenant.id, menu_id)
        return True

    async def _seed_policies(self) -> bool:
        if await self.policies.count() > 0:
            return False
        tenant = await self._default_tenant()
        for role in await self.roles.find_all():
            await self._write_policies(role, tenant.id)
        await self.db.commit()
        return True

    async def _seed_organization(self) -> bool:
        if await self.groups.count() > 0:
            return False
        tenant = await self._default_tenant()
        owner = await self.users.get_by_username(data.ORGANIZATION_OWNER)
        if owner is None:
            raise NotFoundError("User", data.ORGANIZATION_OWNER)

        group_ids = await self._create_unit(data.organization_tree(), None, tenant.id, owner.id)
        await self.db.commit()
        for group_id in group_ids:
            await self.tenant_groups.add(tenant.id, group_id)

        by_name: dict[str, Permission] = {}
        for body in data.ORGANIZATION_PERMISSIONS:
            by_name[body["name"]] = await self.permissions.create(Permission(**body), commit=False)
        await self._grant(data.ORGANIZATION_ROLE_PERMISSIONS, by_name, tenant_id=tenant.id)
        await self.db.commit()
        logger.info("seed_organization_created", groups=len(group_ids))
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _default_tenant(self) -> Tenant:
        tenant = await self.tenants.get_for_update(self.config.default_tenant_slug)
        if tenant is None:
            raise NotFoundError("Tenant", self.config.default_tenant_slug)
        return tenant

    async def _role(self, slug: str) -> Role:
        role = await self.roles.get_by_slug(slug)
        if role is None:
            raise NotFoundError("Role", slug)
        return role

    async def _grant(
        self,
        mapping: dict[str, list[str]],
        permissions: dict[str, Permission],
        *,
        tenant_id: str | None = None,
    ) -> None:
        """Link roles to permissions; with tenant_id also write their policy rows."""
        for slug, names in mapping.items():
            role = await self._role(slug)
            for name in names:
                permission = permissions[name]
                await self.role_permissions.create(
                    RolePermission(role_id=role.id, permission_id=permission.id), commit=False
                )
                if tenant_id is not None:
                    await self.policies.create(
                        self._policy(role, tenant_id, permission), commit=False
                    )

    async def _write_policies(self, role: Role, tenant_id: str) -> None:
        permission_ids = await self.role_permissions.permission_ids(role.id)
        for permission in await self.permissions.get_many(permission_ids):
            await self.policies.create(self._policy(role, tenant_id, permission), commit=False)

    @staticmethod
    def _policy(role: Role, tenant_id: str, permission: Permission) -> PolicyRule:
        # (subject, domain, object, action)
        return PolicyRule(
            p_type="p", v0=role.slug, v1=tenant_id, v2=permission.subject, v3=permission.action
        )

    async def _create_unit(
        self, unit: data.Unit, parent_id: str | None, tenant_id: str, owner_id: str
    ) -> list[str]:
        group = await self.groups.create(
            Group(
                name=unit.name,
                slug=unit.slug,
                type=unit.type,
                parent_id=parent_id,
                tenant_id=tenant_id,
                created_by=owner_id,
                updated_by=owner_id,
            ),
            commit=False,
        )
        ids = [group.id]
        for child in unit.children:
            ids.extend(await self._create_unit(child, group.id, tenant_id, owner_id))
        return ids
