"""Unit tests for UserTenantRoleService."""

import pytest

from tenancy.core.exceptions import (
    AlreadyExistsError,
    FieldInvalidError,
    FieldRequiredError,
    NotFoundError,
)
from tenancy.db.schemas.user_tenant_role import RoleUpdateItem
from tenancy.services.user_tenant_role import UserTenantRoleService


@pytest.fixture
def service(db_session, fake_redis, service_kwargs):
    return UserTenantRoleService(db_session, fake_redis, **service_kwargs)


@pytest.mark.asyncio
async def test_grant_and_query(service, runner):
    await service.add_role_to_user_in_tenant("u-1", "t-1", "admin")
    await service.add_role_to_user_in_tenant("u-1", "t-1", "editor")
    await service.add_role_to_user_in_tenant("u-2", "t-1", "editor")
    await runner.drain()

    assert sorted(await service.get_user_roles_in_tenant("u-1", "t-1")) == ["admin", "editor"]
    assert await service.is_user_in_role_in_tenant("u-2", "t-1", "editor") is True
    assert await service.is_user_in_role_in_tenant("u-2", "t-1", "admin") is False
    assert sorted(await service.get_tenant_users_by_role("t-1", "editor")) == ["u-1", "u-2"]


@pytest.mark.asyncio
async def test_grants_are_scoped_to_tenant(service):
    await service.add_role_to_user_in_tenant("u-1", "t-1", "admin")

    assert await service.get_user_roles_in_tenant("u-1", "t-2") == []


@pytest.mark.asyncio
async def test_duplicate_grant(service):
    await service.add_role_to_user_in_tenant("u-1", "t-1", "admin")

    with pytest.raises(AlreadyExistsError):
        await service.add_role_to_user_in_tenant("u-1", "t-1", "admin")


@pytest.mark.asyncio
async def test_grant_requires_ids(service):
    with pytest.raises(FieldRequiredError) as exc_info:
        await service.add_role_to_user_in_tenant("u-1", "t-1", "")

    assert exc_info.value.field == "role_id"


@pytest.mark.asyncio
async def test_revoke(service, runner):
    await service.add_role_to_user_in_tenant("u-1", "t-1", "admin")
    await service.is_user_in_role_in_tenant("u-1", "t-1", "admin")
    await runner.drain()

    await service.remove_role_from_user_in_tenant("u-1", "t-1", "admin")
    await runner.drain()

    assert await service.is_user_in_role_in_tenant("u-1", "t-1", "admin") is False
    with pytest.raises(NotFoundError):
        await service.remove_role_from_user_in_tenant("u-1", "t-1", "admin")


@pytest.mark.asyncio
async def test_list_tenant_users(service):
    await service.add_role_to_user_in_tenant("u-1", "t-1", "admin")
    await service.add_role_to_user_in_tenant("u-1", "t-1", "editor")
    await service.add_role_to_user_in_tenant("u-2", "t-1", "viewer")

    everyone = await service.list_tenant_users("t-1")
    admins = await service.list_tenant_users("t-1", role_id="admin")

    assert {u.user_id: sorted(u.role_ids) for u in everyone} == {
        "u-1": ["admin", "editor"],
        "u-2": ["viewer"],
    }
    assert [u.user_id for u in admins] == ["u-1"]


@pytest.mark.asyncio
async def test_update_role(service, runner):
    await service.add_role_to_user_in_tenant("u-1", "t-1", "viewer")

    result = await service.update_user_tenant_role("u-1", "t-1", "viewer", "editor")
    await runner.drain()

    assert result["status"] == "updated"
    assert await service.get_user_roles_in_tenant("u-1", "t-1") == ["editor"]


@pytest.mark.asyncio
async def test_update_role_without_old_grant(service):
    """Test a missing old grant does not block the new one."""
    await service.update_user_tenant_role("u-1", "t-1", "ghost", "editor")

    assert await service.is_user_in_role_in_tenant("u-1", "t-1", "editor") is True


@pytest.mark.asyncio
async def test_bulk_update_collects_errors(service, runner):
    await service.add_role_to_user_in_tenant("u-2", "t-1", "viewer")

    result = await service.bulk_update_user_tenant_roles(
        "t-1",
        [
            RoleUpdateItem(user_id="u-1", role_id="admin", operation="add"),
            RoleUpdateItem(user_id="u-2", role_id="viewer", operation="remove"),
            RoleUpdateItem(user_id="u-3", role_id="editor", operation="update"),
            RoleUpdateItem(user_id="u-4", role_id="editor", operation="promote"),
            RoleUpdateItem(user_id="u-1", role_id="admin", operation="add"),
        ],
    )
    await runner.drain()

    assert result.total == 5
    assert result.success == 2
    assert result.failed == 3
    assert [e.user_id for e in result.errors] == ["u-3", "u-4", "u-1"]
    assert result.errors[0].error == "old_role_id is required"
    assert result.errors[1].error == "operation is invalid: 'promote' (unknown operation)"
    assert await service.get_user_roles_in_tenant("u-1", "t-1") == ["admin"]
    assert await service.get_user_roles_in_tenant("u-2", "t-1") == []


@pytest.mark.asyncio
async def test_bulk_item_errors_are_typed(service):
    """Test bad bulk items raise the same field errors as the single-item calls."""
    with pytest.raises(FieldRequiredError) as missing:
        await service._apply("t-1", RoleUpdateItem(user_id="u-1", role_id="r", operation="update"))
    with pytest.raises(FieldInvalidError) as unknown:
        await service._apply("t-1", RoleUpdateItem(user_id="u-1", role_id="r", operation="promote"))

    assert missing.value.field == "old_role_id"
    assert unknown.value.field == "operation"
    assert unknown.value.value == "promote"
