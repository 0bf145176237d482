"""Integration tests for tenant group, menu, dictionary and option bindings."""

import pytest
import pytest_asyncio

from tenancy.db.models import Group


@pytest_asyncio.fixture
async def tenant(create_tenant):
    return await create_tenant("Acme", slug="acme")


@pytest_asyncio.fixture
async def groups(session_factory):
    """Root group with one child in the local groups table."""
    async with session_factory() as session:
        root = Group(id="g-root", name="Headquarters", slug="hq", parent_id=None)
        child = Group(id="g-child", name="Engineering", slug="eng", parent_id="g-root")
        session.add_all([root, child])
        await session.commit()
    return root, child


class TestTenantGroups:
    """Tests for /v1/tenants/{tenant}/groups."""

    @pytest.mark.asyncio
    async def test_bind_and_list(self, authenticated_client, tenant, groups, runner):
        bound = await authenticated_client.post(
            "/v1/tenants/acme/groups", json={"group_id": "g-root"}
        )
        await authenticated_client.post("/v1/tenants/acme/groups", json={"group_id": "g-child"})
        await runner.drain()

        roots = await authenticated_client.get("/v1/tenants/acme/groups")
        children = await authenticated_client.get(
            "/v1/tenants/acme/groups", params={"parent": "g-root"}
        )

        assert bound.status_code == 201
        assert bound.json()["data"]["group_id"] == "g-root"
        assert bound.json()["data"]["tenant_id"] == tenant["id"]
        assert bound.json()["data"]["added_at"] is not None
        assert [g["name"] for g in roots.json()["data"]["items"]] == ["Headquarters"]
        assert [g["id"] for g in children.json()["data"]["items"]] == ["g-child"]

    @pytest.mark.asyncio
    async def test_membership_and_unbind(self, authenticated_client, tenant, groups, runner):
        await authenticated_client.post("/v1/tenants/acme/groups", json={"group_id": "g-root"})
        await runner.drain()

        before = await authenticated_client.get("/v1/tenants/acme/groups/g-root")
        group_tenants = await authenticated_client.get("/v1/groups/g-root/tenants")
        removed = await authenticated_client.delete("/v1/tenants/acme/groups/g-root")
        await runner.drain()
        after = await authenticated_client.get("/v1/tenants/acme/groups/g-root")

        assert before.json()["data"]["bound"] is True
        assert group_tenants.json()["data"] == [tenant["id"]]
        assert removed.status_code == 200
        assert after.json()["data"]["bound"] is False

    @pytest.mark.asyncio
    async def test_duplicate_bind(self, authenticated_client, tenant, groups):
        await authenticated_client.post("/v1/tenants/acme/groups", json={"group_id": "g-root"})

        response = await authenticated_client.post(
            "/v1/tenants/acme/groups", json={"group_id": "g-root"}
        )

        assert response.status_code == 409
        assert response.json()["details"]["entity"] == "TenantGroup"

    @pytest.mark.asyncio
    async def test_unbind_missing(self, authenticated_client, tenant):
        response = await authenticated_client.delete("/v1/tenants/acme/groups/nope")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_empty_tenant(self, authenticated_client, tenant):
        response = await authenticated_client.get("/v1/tenants/acme/groups")

        assert response.json()["data"]["items"] == []
        assert response.json()["data"]["total"] == 0


@pytest.mark.parametrize("segment", ["menus", "dictionaries", "options"])
class TestTenantBindings:
    """Tests for the menu, dictionary and option binding routes."""

    @pytest.mark.asyncio
    async def test_bind_list_unbind(self, authenticated_client, tenant, runner, segment):
        created = await authenticated_client.post(
            f"/v1/tenants/acme/{segment}", json={"related_id": "r-1"}
        )
        await authenticated_client.post(f"/v1/tenants/acme/{segment}", json={"related_id": "r-2"})
        await runner.drain()

        listed = await authenticated_client.get(f"/v1/tenants/acme/{segment}")
        bound = await authenticated_client.get(f"/v1/tenants/acme/{segment}/r-1")
        await authenticated_client.delete(f"/v1/tenants/acme/{segment}/r-1")
        await runner.drain()
        unbound = await authenticated_client.get(f"/v1/tenants/acme/{segment}/r-1")

        assert created.status_code == 201
        assert created.json()["data"]["related_id"] == "r-1"
        assert created.json()["data"]["created_by"] == "user-test-actor"
        assert sorted(listed.json()["data"]["items"]) == ["r-1", "r-2"]
        assert bound.json()["data"]["bound"] is True
        assert unbound.json()["data"]["bound"] is False

    @pytest.mark.asyncio
    async def test_duplicate(self, authenticated_client, tenant, segment):
        await authenticated_client.post(f"/v1/tenants/acme/{segment}", json={"related_id": "r-1"})

        response = await authenticated_client.post(
            f"/v1/tenants/acme/{segment}", json={"related_id": "r-1"}
        )

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_unknown_tenant(self, authenticated_client, segment):
        response = await authenticated_client.post(
            f"/v1/tenants/ghost/{segment}", json={"related_id": "r-1"}
        )

        assert response.status_code == 404
